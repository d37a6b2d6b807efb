"""Tests for ring_director.match_engine: the MatchSimulator."""

import random

import pytest

from ring_director.match_engine import MATCH_TYPES, MatchSimulator
from ring_director.models import EngineError, MatchType, RoundResult


@pytest.fixture
def sim(registry, clock):
    return MatchSimulator(registry, rng=random.Random(77), clock=clock)


# ---------------------------------------------------------------------------
# create_match
# ---------------------------------------------------------------------------

class TestCreateMatch:
    def test_unknown_type_checked_first(self, sim):
        err = sim.create_match(["nobody", "the-rock"], "tables")
        assert isinstance(err, EngineError)
        assert "Unknown match type" in err.error

    def test_unknown_participant(self, sim):
        err = sim.create_match(["john-cena", "hulk-hogan"])
        assert err.error == "Unknown character: hulk-hogan"

    def test_duplicate_participant(self, sim):
        err = sim.create_match(["john-cena", "john-cena"])
        assert isinstance(err, EngineError)

    def test_participant_count_bounds(self, sim):
        assert isinstance(sim.create_match(["john-cena"]), EngineError)
        assert isinstance(sim.create_match(["john-cena", "the-rock", "mankind"]), EngineError)
        assert isinstance(sim.create_match(["john-cena", "the-rock"], "royal-rumble"), EngineError)

    def test_rounds_within_type_range(self, sim, registry):
        ids = registry.list_ids()
        for type_id, mtype in MATCH_TYPES.items():
            for _ in range(20):
                match = sim.create_match(ids[:mtype.min_participants], type_id)
                assert mtype.min_rounds <= match.total_rounds <= mtype.max_rounds

    def test_initial_state(self, sim, clock):
        match = sim.create_match(["john-cena", "the-rock"], for_title="intercontinental")
        assert match.momentum == {"john-cena": 0.0, "the-rock": 0.0}
        assert match.damage == {"john-cena": 0.0, "the-rock": 0.0}
        assert match.for_title == "intercontinental"
        assert match.started_at == clock.now
        assert match.winner is None
        assert sim.active_match is match


# ---------------------------------------------------------------------------
# simulate_round
# ---------------------------------------------------------------------------

class TestSimulateRound:
    def test_no_active_match(self, sim):
        assert sim.simulate_round() is None

    def test_singles_scenario(self, sim):
        sim.create_match(["john-cena", "the-rock"])
        rounds = []
        while True:
            r = sim.simulate_round()
            if r is None:
                break
            rounds.append(r)
        assert rounds[0].phase == "early"
        assert rounds[-1].phase in ("late", "finish")
        assert rounds[-1].is_finish
        match = sim.active_match
        assert match.winner in ("john-cena", "the-rock")
        assert match.win_method in ("pinfall", "submission", "count-out", "dq")
        assert len(match.events) == len(rounds)

    def test_finished_match_is_a_no_op(self, sim):
        sim.create_match(["john-cena", "the-rock"])
        while sim.simulate_round() is not None:
            pass
        assert sim.simulate_round() is None

    def test_combatants_are_distinct(self, sim, registry):
        sim.create_match(registry.list_ids()[:4], "fatal-four-way")
        for _ in range(5):
            r = sim.simulate_round()
            assert r.actor != r.target

    def test_no_weapons_in_singles(self, registry):
        sim = MatchSimulator(registry, rng=random.Random(3))
        for _ in range(60):
            result = sim.simulate_full_match(["stone-cold", "triple-h"])
            assert all(e.beat != "weapon-shot" for e in result.match.events)


# ---------------------------------------------------------------------------
# Beat resolution
# ---------------------------------------------------------------------------

class TestBeatResolution:
    def test_plain_beat(self, registry):
        sim = MatchSimulator(registry, rng=random.Random(5))
        match = sim.create_match(["john-cena", "the-rock"])
        twin = random.Random(5)
        twin.randint(4, 7)
        swing, dealt = sim._resolve_beat(match, "lock-up", "john-cena", "the-rock", "early")
        expected_swing = twin.randint(1, 3)
        expected_dmg = twin.random() * 10
        assert swing == expected_swing
        assert dealt == round(expected_dmg)
        assert match.momentum["john-cena"] == expected_swing
        assert match.momentum["the-rock"] == -1
        assert match.damage["the-rock"] == pytest.approx(expected_dmg)
        assert match.damage["john-cena"] == 0

    def test_reversal_beat_inverts_advantage(self, registry):
        sim = MatchSimulator(registry, rng=random.Random(6))
        match = sim.create_match(["john-cena", "the-rock"])
        twin = random.Random(6)
        twin.randint(4, 7)
        sim._resolve_beat(match, "counter", "john-cena", "the-rock", "mid")
        swing = twin.randint(1, 3)
        dmg = 5 + twin.random() * 15
        assert match.momentum["john-cena"] == swing - 2 * swing
        assert match.momentum["the-rock"] == -1 + 2 * swing
        assert match.damage["the-rock"] == pytest.approx(dmg)
        assert match.damage["john-cena"] == pytest.approx(dmg * 0.5)

    def test_values_stay_clamped_under_fuzzing(self, registry):
        sim = MatchSimulator(registry, rng=random.Random(2025))
        rng = random.Random(9)
        ids = registry.list_ids()
        for _ in range(200):
            type_id = rng.choice(list(MATCH_TYPES))
            mtype = MATCH_TYPES[type_id]
            count = rng.randint(mtype.min_participants, min(mtype.max_participants, len(ids)))
            result = sim.simulate_full_match(rng.sample(ids, count), type_id)
            for r in result.rounds:
                assert all(-10 <= m <= 10 for m in r.momentum.values())
                assert all(0 <= d <= 100 for d in r.damage.values())
            assert len(result.rounds) <= 21
            assert result.match.winner in result.match.participants


# ---------------------------------------------------------------------------
# simulate_full_match
# ---------------------------------------------------------------------------

class TestFullMatch:
    def test_fairness(self, registry):
        sim = MatchSimulator(registry, rng=random.Random(42))
        wins = 0
        for _ in range(100):
            result = sim.simulate_full_match(["john-cena", "the-rock"])
            wins += result.match.winner == "john-cena"
        assert 20 <= wins <= 80

    def test_error_passthrough(self, sim):
        err = sim.simulate_full_match(["john-cena"], "singles")
        assert isinstance(err, EngineError)
        assert sim.match_history == []

    def test_summary_recorded_and_live_match_discarded(self, sim, clock):
        result = sim.simulate_full_match(["john-cena", "the-rock"], for_title="wwe-championship")
        assert sim.active_match is None
        summary = sim.match_history[-1]
        assert summary.id == result.match.id
        assert summary.winner == result.match.winner
        assert summary.rounds == len(result.rounds)
        assert summary.for_title == "wwe-championship"
        assert summary.timestamp == clock.now

    def test_safety_ceiling_forces_finish(self, registry):
        marathon = MatchType(
            name="Iron Man Marathon", min_participants=2, max_participants=2,
            win_conditions=("pinfall", "submission"), min_rounds=40, max_rounds=40,
        )
        sim = MatchSimulator(registry, match_types={"marathon": marathon}, rng=random.Random(1))
        result = sim.simulate_full_match(["undertaker", "mankind"], "marathon")
        assert len(result.rounds) == 21
        last = result.rounds[-1]
        assert last.beat == "forced-finish"
        assert last.is_finish
        assert result.match.win_method == "pinfall"
        winner = result.match.winner
        loser = "mankind" if winner == "undertaker" else "undertaker"
        assert result.match.damage[loser] >= result.match.damage[winner]

    def test_history_bounded(self, sim):
        for _ in range(55):
            sim.simulate_full_match(["john-cena", "the-rock"])
        assert len(sim.match_history) == 50
        assert len(sim.to_dict()["matchHistory"]) == 50

    def test_to_dict_round_trip(self, sim, registry):
        sim.simulate_full_match(["john-cena", "the-rock"])
        fresh = MatchSimulator(registry)
        fresh.load_from(sim.to_dict())
        assert fresh.match_history == sim.match_history

    def test_get_state(self, sim):
        sim.simulate_full_match(["john-cena", "the-rock"])
        state = sim.get_state()
        assert state["activeMatch"] is None
        assert len(state["recentMatches"]) == 1
        assert state["recentMatches"][0]["winMethod"]
        assert len(state["matchTypes"]) == 9


# ---------------------------------------------------------------------------
# build_round_prompt
# ---------------------------------------------------------------------------

class TestRoundPrompt:
    def test_known_beat(self, sim):
        r = RoundResult(round=1, total_rounds=5, phase="early", beat="lock-up",
                        actor="john-cena", target="the-rock")
        prompt = sim.build_round_prompt(r)
        assert prompt.narrative == "John Cena and The Rock lock up in the center of the ring."
        assert prompt.commentary_prompt.startswith("The match is just getting started.")
        assert prompt.character_prompt.startswith("You just experienced this:")

    def test_finisher_name_and_outcome(self, sim):
        r = RoundResult(round=6, total_rounds=6, phase="finish", beat="clean-finish",
                        actor="the-rock", target="john-cena", is_finish=True, winner="the-rock")
        prompt = sim.build_round_prompt(r)
        assert "Rock Bottom" in prompt.narrative
        assert prompt.character_prompt.startswith("You just WON")

    def test_unknown_beat_uses_default(self, sim):
        r = RoundResult(round=2, total_rounds=5, phase="mid", beat="staredown",
                        actor="undertaker", target="mankind", is_finish=True, winner="mankind")
        prompt = sim.build_round_prompt(r)
        assert "exchange blows" in prompt.narrative
        assert prompt.character_prompt.startswith("You just LOST")

    def test_forced_round_has_no_prompt(self, sim):
        r = RoundResult(round=21, total_rounds=40, phase="finish", beat="forced-finish")
        assert sim.build_round_prompt(r) is None
