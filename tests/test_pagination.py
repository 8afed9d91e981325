import pytest

from portal.services.pagination import page_info


def test_second_page_of_three():
    info = page_info(total_count=23, limit=10, offset=10)
    assert info.has_more is True
    assert info.page == 2
    assert info.total_pages == 3


def test_last_page_has_no_more():
    info = page_info(total_count=23, limit=10, offset=20)
    assert info.has_more is False
    assert info.page == 3


def test_empty_result():
    info = page_info(total_count=0, limit=20, offset=0)
    assert info.has_more is False
    assert info.page == 1
    assert info.total_pages == 0


def test_offset_not_aligned_to_limit():
    info = page_info(total_count=50, limit=20, offset=30)
    assert info.page == 2
    assert info.to_out().model_dump() == {"limit": 20, "offset": 30, "page": 2, "total_pages": 3}


def test_rejects_zero_limit():
    with pytest.raises(ValueError):
        page_info(total_count=10, limit=0, offset=0)
