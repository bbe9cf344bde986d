"""IngestionOrchestrator workflow and region health reporting."""

import asyncio

from application.services.ingestion import IngestionOptions, IngestionOrchestrator
from domain.enums import PartitionStatus, Region
from helpers import FakeApi, FakeStore, RecordingSleep, match_table, players

OPTIONS = IngestionOptions(
    leaderboard_sample_size=4,
    match_list_circuit_limit=2,
    ids_per_player=20,
    match_batch_size=4,
    inter_batch_delay_ms=150,
)


def run(api, store=None, options=OPTIONS, limit=50):
    store = store or FakeStore()
    sleep = RecordingSleep()
    orchestrator = IngestionOrchestrator(api, store, options, sleep=sleep)
    result = asyncio.run(orchestrator.process_region(Region.EUW, limit))
    return result, orchestrator.partition(Region.EUW), store, sleep


class TestDegradedRuns:

    def test_empty_leaderboard_is_degraded_not_an_error(self):
        result, partition, store, _ = run(FakeApi(entries=[]))
        assert result == []
        assert partition.status is PartitionStatus.DEGRADED
        assert partition.last_error == "No league data available"
        assert store.statuses[-1] == ("EUW", PartitionStatus.DEGRADED, "No league data available")

    def test_unavailable_leaderboard_is_degraded(self):
        result, partition, _, _ = run(FakeApi(entries=None))
        assert result == []
        assert partition.status is PartitionStatus.DEGRADED

    def test_all_identity_lookups_failing_is_degraded(self):
        entries, _ = players(3)
        result, partition, _, _ = run(FakeApi(entries=entries, summoners={}))
        assert result == []
        assert partition.status is PartitionStatus.DEGRADED
        assert partition.last_error == "No summoner data available"

    def test_no_match_history_is_degraded(self):
        entries, summoners = players(2)
        result, partition, _, _ = run(FakeApi(entries=entries, summoners=summoners))
        assert result == []
        assert partition.last_error == "No matches found"


class TestCollection:

    def test_processing_then_active(self):
        entries, summoners = players(2)
        api = FakeApi(entries, summoners, {"p2": ["EUW_1"]}, match_table(["EUW_1"]))
        result, partition, store, _ = run(api)
        assert [m.id for m in result] == ["EUW_1"]
        assert [s[1] for s in store.statuses] == [PartitionStatus.PROCESSING, PartitionStatus.ACTIVE]
        assert partition.status is PartitionStatus.ACTIVE

    def test_only_top_sample_of_leaderboard_is_used(self):
        entries, summoners = players(6)
        lists = {f"p{i}": [f"EUW_{i}"] for i in range(1, 7)}
        api = FakeApi(entries, summoners, lists, match_table([f"EUW_{i}" for i in range(1, 7)]))
        run(api, options=IngestionOptions(leaderboard_sample_size=4, match_list_circuit_limit=10))
        # highest league points first: s6, s5, s4, s3
        assert api.match_id_calls == ["p6", "p5", "p4", "p3"]

    def test_circuit_breaker_stops_after_two_non_empty_lists(self):
        entries, summoners = players(4)
        lists = {"p4": [], "p3": ["EUW_1", "EUW_2"], "p2": ["EUW_2", "EUW_3"], "p1": ["EUW_9"]}
        api = FakeApi(entries, summoners, lists, match_table(["EUW_1", "EUW_2", "EUW_3", "EUW_9"]))
        result, _, _, _ = run(api)
        assert api.match_id_calls == ["p4", "p3", "p2"]
        assert sorted(m.id for m in result) == ["EUW_1", "EUW_2", "EUW_3"]

    def test_ids_are_deduplicated_and_capped(self):
        entries, summoners = players(2)
        lists = {"p2": ["A", "B", "C"], "p1": ["B", "C", "D"]}
        api = FakeApi(entries, summoners, lists, match_table(["A", "B", "C", "D"]))
        result, _, _, _ = run(api, limit=3)
        assert api.match_calls == ["A", "B", "C"]
        assert len(result) == 3

    def test_details_are_batched_with_a_delay_between_batches(self):
        entries, summoners = players(1)
        ids = [f"EUW_{i}" for i in range(10)]
        api = FakeApi(entries, summoners, {"p1": ids}, match_table(ids))
        result, _, store, sleep = run(api)
        assert len(result) == 10
        # 10 ids in batches of 4 -> 3 batches, 2 pauses
        assert sleep.calls == [0.15, 0.15]
        assert sorted(store.matches) == sorted(ids)

    def test_failed_details_are_skipped(self):
        entries, summoners = players(1)
        api = FakeApi(entries, summoners, {"p1": ["A", "B", "C"]}, match_table(["A", "C"]))
        result, partition, store, _ = run(api)
        assert sorted(m.id for m in result) == ["A", "C"]
        assert partition.status is PartitionStatus.ACTIVE
        assert "B" not in store.matches

    def test_matches_are_normalized(self):
        entries, summoners = players(1)
        api = FakeApi(entries, summoners, {"p1": ["A"]}, match_table(["A"]))
        result, _, _, _ = run(api)
        match = result[0]
        assert match.region == "EUW"
        assert match.participants[0].placement == 1
        assert match.participants[0].units[0].unit_id == "TFT9_Ahri"


class TestFailures:

    def test_auth_error_marks_error_and_keeps_earlier_batches(self):
        entries, summoners = players(1)
        ids = [f"EUW_{i}" for i in range(6)]
        api = FakeApi(entries, summoners, {"p1": ids}, match_table(ids), failing_match="EUW_5")
        result, partition, store, _ = run(api)
        # the first batch of four, plus EUW_4 from the failed second batch
        assert [m.id for m in result] == ids[:5]
        assert partition.status is PartitionStatus.ERROR
        assert partition.error_count == 1
        assert "401" in partition.last_error
        assert sorted(store.matches) == ids[:5]

    def test_failed_batch_settles_and_keeps_its_siblings(self):
        entries, summoners = players(1)
        api = FakeApi(entries, summoners, {"p1": ["m1", "m2"]}, match_table(["m1", "m2"]),
                      failing_match="m1", delays={"m2": 0.05})
        store = FakeStore()
        orchestrator = IngestionOrchestrator(api, store, OPTIONS, sleep=RecordingSleep())

        async def go():
            result = await orchestrator.process_region(Region.EUW, 50)
            pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            return result, pending

        result, pending = asyncio.run(go())
        assert pending == []
        assert [m.id for m in result] == ["m2"]
        assert list(store.matches) == ["m2"]
        assert orchestrator.partition(Region.EUW).status is PartitionStatus.ERROR

    def test_failed_identity_lookup_waits_for_the_others(self):
        entries, summoners = players(2)
        api = FakeApi(entries, summoners, failing_summoner="s2", delays={"s1": 0.05})
        orchestrator = IngestionOrchestrator(api, FakeStore(), OPTIONS, sleep=RecordingSleep())

        async def go():
            result = await orchestrator.process_region(Region.EUW, 50)
            pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            return result, pending

        result, pending = asyncio.run(go())
        assert pending == []
        assert result == []
        assert api.completed == ["s1"]
        assert api.match_id_calls == []
        partition = orchestrator.partition(Region.EUW)
        assert partition.status is PartitionStatus.ERROR
        assert "403" in partition.last_error

    def test_store_outage_while_reporting_failure_does_not_raise(self):
        api = FakeApi(entries=[])
        result, partition, _, _ = run(api, store=FakeStore(fail_status_updates=True))
        assert result == []
        assert partition.status is PartitionStatus.ERROR
