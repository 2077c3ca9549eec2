import datetime as dt

import pytest

from core.models import DailySequence
from core.services import sequences
from core.services.animals import generate_code

pytestmark = pytest.mark.django_db


def test_numbers_are_daily_and_zero_padded():
    day = dt.date(2025, 1, 1)
    assert sequences.next_number(sequences.INVOICE, 'INV', on=day) == 'INV-20250101-0001'
    assert sequences.next_number(sequences.INVOICE, 'INV', on=day) == 'INV-20250101-0002'
    # another day starts over
    assert sequences.next_number(sequences.INVOICE, 'INV', on=dt.date(2025, 1, 2)) == 'INV-20250102-0001'


def test_keys_do_not_share_counters():
    day = dt.date(2025, 3, 1)
    sequences.next_number(sequences.INVOICE, 'INV', on=day)
    assert sequences.next_number(sequences.PAYMENT, 'PAY', on=day) == 'PAY-20250301-0001'
    assert DailySequence.objects.get(key=sequences.INVOICE, date='20250301').value == 1


def test_animal_code_uses_species_letter_and_birth_date():
    assert generate_code('DOG', dt.date(2020, 3, 15)) == 'D-20200315-0000001'
    assert generate_code('CAT', dt.date(2020, 3, 15)) == 'C-20200315-0000002'
    assert generate_code('RABBIT') == 'R-00000000-0000001'
