"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import List

from medicate.env import Settings
from medicate.models import RawCandidate, ScoredCandidate


@pytest.fixture
def longchau_item() -> RawCandidate:
    """Typical pharmacy-chain listing."""
    return RawCandidate(
        title="Paracetamol 500mg viên nén | Nhà thuốc Long Châu",
        link="https://nhathuoclongchau.com/abc",
        snippet="Thuốc giảm đau paracetamol 500mg",
    )


@pytest.fixture
def search_items() -> List[RawCandidate]:
    """Ten results for one barcode, roughly as Google returns them."""
    return [
        RawCandidate(
            title="Panadol Extra viên nén | Nhà thuốc Long Châu",
            link="https://nhathuoclongchau.com.vn/thuoc/panadol-extra",
            snippet="Thuốc Panadol Extra chứa paracetamol 500mg và caffeine 65mg",
        ),
        RawCandidate(
            title="Panadol Extra viên nén - Pharmacity",
            link="https://www.pharmacity.vn/panadol-extra.html",
            snippet="Panadol Extra giảm đau hạ sốt, paracetamol 500mg",
        ),
        RawCandidate(
            title="Combo 2 hộp Panadol Extra tặng kèm túi",
            link="https://shopee.vn/combo-panadol-i.123.456",
            snippet="Mua ngay combo giá tốt",
        ),
        RawCandidate(
            title="Panadol Extra viên nén hộp 15 vỉ x 12 viên",
            link="https://medigo.vn/panadol-extra",
            snippet="Dược phẩm chính hãng",
        ),
        RawCandidate(
            title="8934567890123 - Tra cứu mã vạch",
            link="https://barcode.example.com/8934567890123",
            snippet="",
        ),
        RawCandidate(title="| Nhà thuốc An Khang", link="https://nhathuocankhang.com", snippet=""),
    ]


@pytest.fixture
def settings() -> Settings:
    """Settings with credentials, so the default search path is reachable."""
    return Settings(google_api_key="test-key", google_cse_id="test-cx")


@pytest.fixture
def make_scored():
    """Factory for already-scored candidates, bypassing the heuristics."""
    def _make(cleaned: str, score: float, link: str = "") -> ScoredCandidate:
        return ScoredCandidate(
            title=cleaned,
            link=link,
            snippet="",
            cleaned=cleaned,
            hostname="",
            score=score,
        )
    return _make
