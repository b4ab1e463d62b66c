from utils.aggregate import (
    PALETTE, assign_colors, build_master_map, derive_groups, finalize_groups,
    master_key, resolve_groups, sort_groups,
)
from utils.normalize import normalize_group_rows, normalize_masters, normalize_members

ROSTER = normalize_members([
    {"name": "A", "kaiha": "X"},
    {"name": "B", "kaiha": "X"},
    {"name": "C", "kaiha": "Y"},
])

def _g(name, seats, bloc="opposition", order=None, color=None):
    return {"name": name, "seats": seats, "bloc": bloc, "order": order, "color": color, "shortLabel": None}

def test_roster_without_master_counts_heads_and_sorts_by_seats():
    groups = resolve_groups(None, ROSTER, [])
    assert [(g["name"], g["seats"], g["bloc"]) for g in groups] == [("X", 2, "opposition"), ("Y", 1, "opposition")]
    assert [g["order"] for g in groups] == [None, None]

def test_master_reclassifies_and_orders_first():
    roster = ROSTER + normalize_members([{"name": n, "kaiha": "Z"} for n in "DEFG"])
    masters = normalize_masters([{"name": "X", "bloc": "government", "order": "1"}])
    groups = resolve_groups(None, roster, masters)
    assert groups[0]["name"] == "X" and groups[0]["bloc"] == "government"
    assert [g["name"] for g in groups] == ["X", "Z", "Y"]

def test_master_join_ignores_whitespace_and_case():
    assert master_key(" Abc  D　e ") == "abcde"
    masters = normalize_masters([{"name": "Team  Blue ", "bloc": "ruling", "color": "#00f"}])
    roster = normalize_members([{"name": "A", "kaiha": "team blue"}])
    [g] = derive_groups(roster, masters)
    assert g["name"] == "team blue"
    assert g["bloc"] == "government" and g["color"] == "#00f"

def test_master_map_first_row_wins():
    masters = normalize_masters([{"name": "X", "color": "#111"}, {"name": "x", "color": "#222"}])
    assert build_master_map(masters)["x"]["color"] == "#111"

def test_unmatched_group_gets_defaults():
    masters = normalize_masters([{"name": "Other", "bloc": "与党"}])
    [g] = derive_groups(normalize_members([{"name": "A", "kaiha": "Solo"}]), masters)
    assert g["bloc"] == "opposition" and g["color"] is None and g["order"] is None

def test_sort_order_beats_bloc_beats_seats():
    groups = [
        _g("opp-big", 100),
        _g("gov-small", 5, bloc="government"),
        _g("ordered-2", 1, order=2),
        _g("ordered-1", 1, order=1),
    ]
    assert [g["name"] for g in sort_groups(groups)] == ["ordered-1", "ordered-2", "gov-small", "opp-big"]

def test_sort_is_stable_for_full_ties():
    groups = [_g("first", 3), _g("second", 3), _g("third", 3)]
    assert [g["name"] for g in sort_groups(groups)] == ["first", "second", "third"]
    groups = [_g("b", 3, order=1), _g("a", 3, order=1)]
    assert [g["name"] for g in sort_groups(groups)] == ["b", "a"]

def test_colors_backfilled_by_sorted_position_and_cycle():
    groups = [_g(f"g{i}", 20 - i) for i in range(12)]
    groups[1]["color"] = "#explicit"
    out = assign_colors(sort_groups(groups))
    assert out[0]["color"] == PALETTE[0]
    assert out[1]["color"] == "#explicit"
    assert out[2]["color"] == PALETTE[2]
    assert out[10]["color"] == PALETTE[0]
    assert out[11]["color"] == PALETTE[1]

def test_finalize_drops_empty_groups_and_merges_duplicate_names():
    out = finalize_groups([_g("A", 2), _g("B", 0), _g("A", 3), _g("C", 4)])
    assert [(g["name"], g["seats"]) for g in out] == [("A", 5), ("C", 4)]

def test_explicit_rows_win_over_roster():
    explicit = [_g("P", 10, order=1), _g("Q", 20, order=2)]
    groups = resolve_groups(explicit, ROSTER, [])
    assert [(g["name"], g["seats"]) for g in groups] == [("P", 10), ("Q", 20)]

def test_seat_total_equals_head_count():
    roster = normalize_members([{"name": f"m{i}", "kaiha": "ABC"[i % 3]} for i in range(50)])
    groups = resolve_groups(None, roster, [])
    assert sum(g["seats"] for g in groups) == len(roster)

def test_explicit_rows_pick_up_master_bloc_color_and_order():
    rows = normalize_group_rows([{"name": "Big", "seats": "100"}, {"name": "Small", "seats": "5"}])
    masters = normalize_masters([{"name": "small ", "bloc": "government", "color": "#abc", "order": "1", "abbr": "S"}])
    groups = resolve_groups(rows, [], masters)
    assert [(g["name"], g["seats"], g["bloc"], g["color"], g["order"]) for g in groups] == [
        ("Small", 5, "government", "#abc", 1),
        ("Big", 100, "opposition", PALETTE[1], 1),
    ]
    assert groups[0]["shortLabel"] == "S"

def test_explicit_row_cells_beat_master():
    rows = normalize_group_rows([{"name": "X", "seats": "3", "bloc": "opposition", "color": "#111", "order": "9"}])
    masters = normalize_masters([{"name": "X", "bloc": "gov", "color": "#222", "order": "1"}])
    [g] = resolve_groups(rows, [], masters)
    assert (g["bloc"], g["color"], g["order"], g["seats"]) == ("opposition", "#111", 9, 3)
