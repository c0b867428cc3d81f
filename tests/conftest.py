import pytest

from fakes import make_pdf


@pytest.fixture
def letter_pdf():
    return make_pdf([(612, 792), (612, 792)])


@pytest.fixture
def a4_pdf():
    return make_pdf([(595, 842)] * 3)
