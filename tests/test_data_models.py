"""Tests for core data models."""

import pytest

from minpath.core.data_models import Burrow, Hall, Room, Token, TokenKind


class TestTokenKind:
    """Test token kinds and their movement costs."""

    def test_movement_costs(self):
        assert [kind.movement_cost for kind in TokenKind] == [1, 10, 100, 1000]

    def test_from_char(self):
        assert TokenKind.from_char('C') is TokenKind.COPPER
        assert TokenKind.DESERT.symbol == 'D'

        with pytest.raises(ValueError, match="Invalid token kind"):
            TokenKind.from_char('E')

    def test_ordering(self):
        assert sorted([TokenKind.DESERT, TokenKind.AMBER, TokenKind.COPPER]) == [
            TokenKind.AMBER, TokenKind.COPPER, TokenKind.DESERT
        ]


class TestRoom:

    def test_cells_top_down(self):
        room = Room(x=3, y_start=2, y_stop=5, kind=TokenKind.AMBER)

        assert room.depth == 3
        assert list(room.cells()) == [(3, 2), (3, 3), (3, 4)]
        assert room.contains((3, 4))
        assert not room.contains((3, 5))
        assert not room.contains((4, 2))


class TestBurrow:
    """Test the burrow layout."""

    @pytest.fixture
    def burrow(self):
        return Burrow(
            hall=Hall(y=1, x_start=1, x_stop=8),
            rooms=(Room(3, 2, 4, TokenKind.AMBER), Room(5, 2, 4, TokenKind.BRONZE)),
        )

    def test_lookup(self, burrow):
        assert burrow.room_for(TokenKind.BRONZE).x == 5
        assert burrow.room_at((3, 3)).kind is TokenKind.AMBER
        assert burrow.room_at((4, 2)) is None
        assert burrow.is_entrance(5)
        assert not burrow.is_entrance(4)

    def test_room_for_missing_kind(self, burrow):
        with pytest.raises(KeyError):
            burrow.room_for(TokenKind.DESERT)

    def test_canonical_state(self, burrow):
        first = Burrow.make_state([Token(TokenKind.BRONZE, (3, 2)), Token(TokenKind.AMBER, (5, 3)),
                                   Token(TokenKind.AMBER, (1, 1))])
        second = Burrow.make_state([Token(TokenKind.AMBER, (1, 1)), Token(TokenKind.AMBER, (5, 3)),
                                    Token(TokenKind.BRONZE, (3, 2))])

        assert first == second
        assert hash(first) == hash(second)
        assert burrow.occupancy(first)[(3, 2)].kind is TokenKind.BRONZE

    def test_rejects_duplicate_kinds(self):
        with pytest.raises(AssertionError, match="Duplicate"):
            Burrow(hall=Hall(1, 1, 8),
                   rooms=(Room(3, 2, 4, TokenKind.AMBER), Room(5, 2, 4, TokenKind.AMBER)))

    def test_rejects_room_off_the_hall(self):
        with pytest.raises(AssertionError, match="entrance"):
            Burrow(hall=Hall(1, 1, 4), rooms=(Room(6, 2, 4, TokenKind.AMBER),))
