from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from db.session_manager import get_or_create
from models.tag import Tag
from services.tag_service import resolve_or_create_tag, tag_hash
from utils.error_handling import ValidationError


@pytest.mark.parametrize("label, expected", [
    ('Transport', 'transport'),
    ('Public Transport', 'public-transport'),
    ('  Health & Care!  ', 'health-care'),
    ('2026 Budget', '2026-budget'),
])
def test_tag_hash(label, expected):
    assert tag_hash(label) == expected


def test_resolve_creates_then_reuses(db_session):
    first = resolve_or_create_tag('Public Transport')
    db_session.commit()
    second = resolve_or_create_tag('public transport')

    assert first.id == second.id
    assert second.name == 'Public Transport'
    assert db_session.query(Tag).count() == 1


@pytest.mark.parametrize("label", ['', '   ', '!!!', None])
def test_invalid_label(db_session, label):
    with pytest.raises(ValidationError):
        resolve_or_create_tag(label)


def test_creation_race_falls_back_to_lookup():
    """The loser of a creation race gets the winner's row instead of an error."""
    winner = Tag(hash='housing', name='Housing')
    mock_session = MagicMock()
    mock_session.query.return_value.filter_by.return_value.first.side_effect = [None, winner]
    mock_session.flush.side_effect = IntegrityError('INSERT INTO tags', {}, Exception('UNIQUE constraint failed'))

    tag, created = get_or_create(mock_session, Tag, defaults={'name': 'Housing'}, hash='housing')

    assert tag is winner
    assert created is False
    mock_session.rollback.assert_called_once()


def test_creation_conflict_without_winner_is_raised():
    mock_session = MagicMock()
    mock_session.query.return_value.filter_by.return_value.first.return_value = None
    mock_session.flush.side_effect = IntegrityError('INSERT INTO tags', {}, Exception('NOT NULL constraint failed'))

    with pytest.raises(IntegrityError):
        get_or_create(mock_session, Tag, hash='housing')
