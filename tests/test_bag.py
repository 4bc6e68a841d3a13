from bag import UNLIMITED, Bag
from models import Position, Template

DOMINO = Template([Position(0, 0), Position(1, 0)], "D")
TROMINO = Template([Position(0, 0), Position(1, 0), Position(2, 0)], "I")


def test_iteration_yields_one_copy_less():
    bag = Bag([(2, DOMINO), (1, TROMINO)])
    drawn = list(bag)
    assert [t.name for t, _ in drawn] == ["D", "I"]
    rest_after_domino = drawn[0][1]
    assert rest_after_domino.remaining(DOMINO) == 1
    assert rest_after_domino.remaining(TROMINO) == 1
    rest_after_tromino = drawn[1][1]
    assert rest_after_tromino.remaining(TROMINO) == 0
    assert [t.name for t, _ in rest_after_tromino] == ["D"]


def test_iteration_leaves_bag_untouched():
    bag = Bag([(1, DOMINO)])
    for _template, rest in bag:
        assert rest.is_empty()
    assert bag.remaining(DOMINO) == 1
    assert len(list(bag)) == 1


def test_unlimited_entry_never_runs_out():
    bag = Bag.unlimited(DOMINO)
    (template, rest), = list(bag)
    assert template == DOMINO
    assert rest is bag
    assert bag.remaining(DOMINO) is UNLIMITED
    assert bag.has_unlimited


def test_negative_and_none_counts_mean_unlimited():
    bag = Bag([(-1, DOMINO), (None, TROMINO)])
    assert all(count is UNLIMITED for count, _ in bag.entries)


def test_exhausted_entries_are_skipped():
    bag = Bag([(0, DOMINO), (1, TROMINO)])
    assert [t.name for t, _ in bag] == ["I"]
    assert bag.templates() == [TROMINO]
    assert not bag.is_empty()
    assert Bag([(0, DOMINO)]).is_empty()
    assert Bag().is_empty()


def test_sizes_and_length():
    bag = Bag([(2, DOMINO), (UNLIMITED, TROMINO), (0, DOMINO)])
    assert bag.piece_sizes() == [(2, 2), (3, UNLIMITED)]
    assert len(bag) == 2


def test_of_and_clone():
    bag = Bag.of(DOMINO, TROMINO)
    assert [c for c, _ in bag.entries] == [1, 1]
    assert bag.clone() is bag
    assert bag.clone() == Bag([(1, DOMINO), (1, TROMINO)])
