import random

import pytest

from ring_director.championships import ChampionshipLedger
from ring_director.characters import CharacterRegistry
from ring_director.match_engine import MatchSimulator
from ring_director.models import Character, EngineError, Feud
from ring_director.ppv import PPV_TEMPLATES, PPVBooker, tier_for_intensity


@pytest.fixture
def booker(registry, clock):
    return PPVBooker(registry, clock=clock)


def _feud(a, b, intensity):
    return Feud(between=[a, b], intensity=intensity)


def _result(registry, participants):
    return MatchSimulator(registry, rng=random.Random(11)).simulate_full_match(participants)


class TestScheduling:
    def test_schedule_from_template(self, booker, clock):
        event = booker.schedule_event("wrestlemania", scheduled_at=123)
        assert event.id.startswith("ppv-")
        assert event.name == "WrestleMania"
        assert event.prestige == 10
        assert event.status == "scheduled"
        assert event.scheduled_at == 123
        assert event.created_at == clock.now
        assert booker.scheduled_events == [event]

    def test_custom_name_and_card(self, booker):
        event = booker.schedule_event(
            "summerslam", name="SummerSlam '98",
            match_card=[{"order": 1, "participants": ["stone-cold", "undertaker"]}],
        )
        assert event.name == "SummerSlam '98"
        assert event.match_card[0].participants == ["stone-cold", "undertaker"]

    def test_unknown_template(self, booker):
        err = booker.schedule_event("starrcade")
        assert isinstance(err, EngineError)
        assert booker.scheduled_events == []

    def test_get_event(self, booker):
        event = booker.schedule_event("royal-rumble")
        assert booker.get_event(event.id) is event
        assert booker.get_event("ppv-missing") is None


class TestAddMatch:
    def test_appends_in_order(self, booker):
        event = booker.schedule_event("summerslam")
        first = booker.add_match(event.id, ["john-cena", "the-rock"], "singles")
        second = booker.add_match(event.id, ["stone-cold", "triple-h"], "steel-cage", for_title="intercontinental")
        assert (first.order, second.order) == (1, 2)
        assert second.for_title == "intercontinental"

    def test_house_match_type(self, booker):
        event = booker.schedule_event("hell-in-a-cell-ppv")
        entry = booker.add_match(event.id, ["undertaker", "mankind"])
        assert entry.match_type == "hell-in-a-cell"

        tlc = booker.schedule_event("tables-ladders-chairs")
        assert booker.add_match(tlc.id, ["undertaker", "mankind"]).match_type == "no-dq"

    def test_errors(self, booker):
        event = booker.schedule_event("summerslam")
        assert booker.add_match("ppv-missing", ["john-cena", "the-rock"]).error == "Event not found"
        assert isinstance(booker.add_match(event.id, ["john-cena", "the-rock"], "tornado"), EngineError)
        err = booker.add_match(event.id, ["john-cena", "hulk-hogan"])
        assert err.error == "Unknown character: hulk-hogan"
        assert event.match_card == []

    def test_started_event_is_locked(self, booker):
        event = booker.schedule_event("summerslam")
        booker.add_match(event.id, ["john-cena", "the-rock"])
        booker.start_event(event.id)
        err = booker.add_match(event.id, ["stone-cold", "mankind"])
        assert err.error == "Event already started/completed"


class TestAutoBook:
    def test_tier_for_intensity(self):
        assert tier_for_intensity(9) == "hell-in-a-cell"
        assert tier_for_intensity(8) == "hell-in-a-cell"
        assert tier_for_intensity(7.9) == "no-dq"
        assert tier_for_intensity(6) == "no-dq"
        assert tier_for_intensity(5.9) == "singles"

    def test_feuds_then_roster(self, booker, registry):
        ledger = ChampionshipLedger()
        ledger.award_title("wwe-championship", "john-cena")
        event = booker.schedule_event("wrestlemania")
        feuds = [_feud("stone-cold", "mankind", 6.5), _feud("john-cena", "the-rock", 8.5)]

        card = booker.auto_book_card(event, feuds, registry.list_ids(), ledger)

        assert [m.participants for m in card] == [
            ["john-cena", "the-rock"],
            ["stone-cold", "mankind"],
            ["undertaker", "macho-man"],
        ]
        assert [m.match_type for m in card] == ["hell-in-a-cell", "no-dq", "singles"]
        assert card[0].is_main_event and not card[1].is_main_event
        assert card[0].for_title == "wwe-championship"
        assert card[1].for_title is None
        assert [m.order for m in card] == [1, 2, 3]
        assert event.match_card == []

    def test_each_character_booked_once(self, booker, registry):
        event = booker.schedule_event("wrestlemania")
        feuds = [
            _feud("john-cena", "the-rock", 9),
            _feud("john-cena", "triple-h", 7),
            _feud("triple-h", "stone-cold", 6),
        ]
        card = booker.auto_book_card(event, feuds, [], None)
        assert [m.participants for m in card] == [["john-cena", "the-rock"], ["triple-h", "stone-cold"]]

    def test_unknown_characters_skipped(self, booker):
        event = booker.schedule_event("wrestlemania")
        card = booker.auto_book_card(event, [_feud("john-cena", "ghost", 9)], ["ghost", "mankind"], None)
        assert card == []

    def test_card_capped_at_six(self, clock):
        roster = [
            Character(id=f"w{i}", name=f"Worker {i}", display_name=f"Worker {i}",
                      alignment="face", response_chance=0.5, feud_response_chance=0.9)
            for i in range(14)
        ]
        booker = PPVBooker(CharacterRegistry(roster), clock=clock)
        event = booker.schedule_event("wrestlemania")
        feuds = [_feud(f"w{2 * i}", f"w{2 * i + 1}", 5 + i * 0.1) for i in range(6)]

        card = booker.auto_book_card(event, feuds, [c.id for c in roster], None)

        assert len(card) == 6
        assert ["w12", "w13"] not in [m.participants for m in card]
        # five feud matches, then the first two unbooked workers in roster order
        assert card[-1].participants == ["w0", "w1"]


class TestRunning:
    def test_start_record_complete(self, booker, registry, clock):
        event = booker.schedule_event("summerslam")
        booker.add_match(event.id, ["john-cena", "the-rock"], for_title="wwe-championship")

        started = booker.start_event(event.id)
        assert started.status == "in-progress"
        assert booker.active_event is event
        assert booker.scheduled_events == []

        result = _result(registry, ["john-cena", "the-rock"])
        record = booker.record_match_result(1, result)
        assert record.winner == result.match.winner
        assert record.rounds == len(result.rounds)
        assert record.for_title == "wwe-championship"

        clock.advance(1000)
        done = booker.complete_event()
        assert done.status == "completed"
        assert done.completed_at == clock.now
        assert booker.active_event is None
        assert booker.completed_events == [event]
        assert booker.get_event(event.id) is event

    def test_start_errors(self, booker):
        assert booker.start_event("ppv-missing").error == "Event not found"
        empty = booker.schedule_event("summerslam")
        assert booker.start_event(empty.id).error == "No matches on the card"

    def test_one_event_at_a_time(self, booker):
        first = booker.schedule_event("summerslam")
        second = booker.schedule_event("royal-rumble")
        booker.add_match(first.id, ["john-cena", "the-rock"])
        booker.add_match(second.id, ["stone-cold", "mankind"])
        booker.start_event(first.id)
        err = booker.start_event(second.id)
        assert "already in progress" in err.error
        assert second.status == "scheduled"

    def test_record_without_event(self, booker, registry):
        result = _result(registry, ["john-cena", "the-rock"])
        assert isinstance(booker.record_match_result(1, result), EngineError)

    def test_record_unknown_order(self, booker, registry):
        event = booker.schedule_event("summerslam")
        booker.add_match(event.id, ["john-cena", "the-rock"])
        booker.start_event(event.id)
        result = _result(registry, ["john-cena", "the-rock"])
        assert isinstance(booker.record_match_result(4, result), EngineError)

    def test_complete_without_event(self, booker):
        assert booker.complete_event() is None


class TestShowCopy:
    def test_hype_messages(self, booker):
        event = booker.schedule_event("wrestlemania")
        booker.add_match(event.id, ["john-cena", "the-rock"], "no-dq",
                         for_title="wwe-championship", is_main_event=True)
        booker.add_match(event.id, ["stone-cold", "mankind"])
        messages = booker.build_hype_messages(event)
        assert messages[0].startswith("🌟 **WRESTLEMANIA** 🌟")
        assert "The Showcase of the Immortals" in messages[0]
        assert messages[1] == (
            "1. John Cena 🎺 vs The Rock 🪨⚡ [NO-DQ] *(wwe-championship on the line!)* 🌟 **MAIN EVENT**"
        )
        assert messages[2].startswith("2. Stone Cold 🍺💀 vs ")
        assert "[" not in messages[2]

    def test_results_summary(self, booker, registry):
        event = booker.schedule_event("summerslam")
        booker.add_match(event.id, ["john-cena", "the-rock"], is_main_event=True)
        booker.start_event(event.id)
        result = _result(registry, ["john-cena", "the-rock"])
        booker.record_match_result(1, result)
        summary = booker.build_results_summary(event)

        assert summary.startswith("☀️ **SUMMERSLAM: RESULTS** ☀️")
        assert "**Match 1 🌟:** John Cena 🎺 vs The Rock 🪨⚡" in summary
        assert f"({result.match.win_method})" in summary
        assert "NEW CHAMPION" not in summary

    def test_empty_summary(self, booker):
        event = booker.schedule_event("summerslam")
        assert booker.build_results_summary(event) == ""


class TestPersistence:
    def test_round_trip(self, booker, registry, clock):
        first = booker.schedule_event("summerslam")
        booker.add_match(first.id, ["john-cena", "the-rock"])
        booker.start_event(first.id)
        booker.record_match_result(1, _result(registry, ["john-cena", "the-rock"]))
        booker.complete_event()
        booker.schedule_event("royal-rumble")

        fresh = PPVBooker(registry, clock=clock)
        fresh.load_from(booker.to_dict())
        assert fresh.scheduled_events == booker.scheduled_events
        assert fresh.completed_events == booker.completed_events
        assert fresh.active_event is None

    def test_get_state_lists_templates(self, booker):
        state = booker.get_state()
        assert {t["id"] for t in state["templates"]} == set(PPV_TEMPLATES)
        assert state["active"] is None

    def test_get_state_templates_carry_match_count_range(self, booker):
        by_id = {t["id"]: t for t in booker.get_state()["templates"]}
        mania = by_id["wrestlemania"]
        assert (mania["minMatches"], mania["maxMatches"]) == (4, 7)
        assert mania["tagline"] == "The Showcase of the Immortals"
        assert by_id["royal-rumble"]["minMatches"] == 3
        assert by_id["royal-rumble"]["maxMatches"] == 5
        assert by_id["hell-in-a-cell-ppv"]["defaultMatchType"] == "hell-in-a-cell"
