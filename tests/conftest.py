import pytest

from schemas import EnquirySettings
from tests.factories import make_product


@pytest.fixture
def shirt():
    return make_product()


@pytest.fixture
def gift_card():
    return make_product(id="p2", name="Gift Card", price=0.0, showPrice=False, category="Gifts")


@pytest.fixture
def enquiry_settings():
    return EnquirySettings(whatsappNumber="919876543210", prefilledText="Items:\n{{items}}\nTotal: {{total}}")
