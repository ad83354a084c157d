"""
End-to-end tests for the workflow engine.

Each test drives a session through the real turn and analysis graphs
against a temporary SQLite store, with fake model adapters.
"""

import asyncio
import sqlite3
from unittest.mock import MagicMock

from PODAssistant.agents.base import AgentResult
from PODAssistant.docket_store import StoreError
from PODAssistant.prompts import (
    ANALYSIS_FAILED,
    COMMIT_FAILED,
    COMMIT_NO_DOCKET,
    COMMIT_NO_EVIDENCE,
    FREEFORM_UNAVAILABLE,
    RESET_CONFIRMATION,
    UPLOAD_BUSY,
)
from PODAssistant.state import DocketStatus, WorkflowStage

GOOD = "Signature found, address matches. This POD is good."
BAD = "No signature visible. This POD is bad."


def _loading(session):
    return [m for m in session.messages if m.status == "loading"]


class TestDocketLookup:
    def test_found_docket_becomes_active(self, engine):
        session = engine.open_session()
        emitted = asyncio.run(engine.submit_text(session, "DKT-1002"))

        assert [m.role for m in emitted] == ["user", "assistant"]
        assert "Jane Smith" in emitted[-1].content
        assert "456 Oak Ave, Metropolis" in emitted[-1].content
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE
        assert session.state.active_docket.id == "DKT-1002"

    def test_lookup_matches_store(self, engine, store):
        session = engine.open_session()
        emitted = asyncio.run(engine.submit_text(session, "find dkt-1001"))

        docket = store.get("DKT-1001")
        assert docket.customer_name in emitted[-1].content
        assert docket.delivery_address in emitted[-1].content
        assert session.state.active_docket == docket

    def test_unknown_docket_lists_samples(self, engine):
        session = engine.open_session()
        asyncio.run(engine.submit_text(session, "DKT-1001"))
        before = session.state

        emitted = asyncio.run(engine.submit_text(session, "DKT-9999"))

        content = emitted[-1].content
        for sample in ("DKT-1001", "DKT-1002", "DKT-1003"):
            assert sample in content
        assert session.state == before

    def test_unknown_docket_from_no_docket(self, engine):
        session = engine.open_session()
        asyncio.run(engine.submit_text(session, "DKT-9999"))
        assert session.state.stage == WorkflowStage.NO_DOCKET

    def test_docket_with_provisioned_status(self, engine, store):
        with sqlite3.connect(store.db_path) as conn:
            conn.execute(
                "INSERT INTO dockets (id, customer_name, delivery_address, status) "
                "VALUES ('DKT-2001', 'Wayne Enterprises', '1007 Mountain Dr', "
                "'Out for Delivery')"
            )
        session = engine.open_session()

        emitted = asyncio.run(engine.submit_text(session, "DKT-2001"))

        assert "Out for Delivery" in emitted[-1].content
        assert session.state.active_docket.id == "DKT-2001"
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE


class TestUpload:
    def test_upload_without_docket(self, engine, verifier, pod_image):
        session = engine.open_session()
        emitted = asyncio.run(engine.upload_image(session, pod_image))

        assert len(emitted) == 1
        assert "search for a docket" in emitted[0].content
        assert verifier.calls == []
        assert session.state.stage == WorkflowStage.NO_DOCKET

    def test_good_pod_becomes_evidence(self, engine, verifier, pod_image):
        verifier.results = [AgentResult(response=GOOD)]
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            return await engine.upload_image(session, pod_image)

        uploaded, verdict = asyncio.run(scenario())

        assert uploaded.role == "user"
        assert uploaded.image == pod_image.data_url
        assert verdict.status == "success"
        assert verdict.content == GOOD
        assert session.messages.get(verdict.id).status == "success"
        assert _loading(session) == []
        assert session.state.stage == WorkflowStage.EVIDENCE_PENDING
        assert session.state.pending_evidence == pod_image
        assert session.verification_in_flight is False
        assert verifier.calls == [{
            "id": "DKT-1001",
            "customer_name": "John Doe",
            "address": "123 Maple St, Springfield",
        }]

    def test_bad_pod_resolves_success_without_evidence(self, engine, verifier, pod_image):
        verifier.results = [AgentResult(response=BAD)]
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1003")
            return await engine.upload_image(session, pod_image)

        _, verdict = asyncio.run(scenario())

        assert verdict.status == "success"
        assert verdict.content == BAD
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE

    def test_verifier_failure_resolves_error(self, engine, verifier, pod_image):
        verifier.results = [AgentResult(error="503 Service Unavailable")]
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            return await engine.upload_image(session, pod_image)

        _, verdict = asyncio.run(scenario())

        assert verdict.status == "error"
        assert verdict.content == ANALYSIS_FAILED
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE
        assert len(verifier.calls) == 1


class TestCommit:
    def test_commit_without_docket(self, engine):
        session = engine.open_session()
        emitted = asyncio.run(engine.submit_text(session, "please update"))
        assert emitted[-1].content == COMMIT_NO_DOCKET
        assert session.state.stage == WorkflowStage.NO_DOCKET

    def test_commit_without_evidence(self, engine, store):
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            return await engine.submit_text(session, "please update")

        emitted = asyncio.run(scenario())
        assert emitted[-1].content == COMMIT_NO_EVIDENCE
        assert store.get("DKT-1001").status == DocketStatus.PENDING

    def test_commit_with_evidence(self, store, verifier, make_engine, pod_image):
        spy = MagicMock(wraps=store)
        engine = make_engine(verifier=verifier, store_=spy)
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            await engine.upload_image(session, pod_image)
            assert session.state.stage == WorkflowStage.EVIDENCE_PENDING
            return await engine.submit_text(session, "please update")

        emitted = asyncio.run(scenario())

        spy.update.assert_called_once_with("DKT-1001", DocketStatus.DELIVERED, True)
        assert "DKT-1001" in emitted[-1].content
        assert "Delivered" in emitted[-1].content
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE
        assert session.state.active_docket.id == "DKT-1001"
        assert session.state.pending_evidence is None

        docket = store.get("DKT-1001")
        assert docket.status == DocketStatus.DELIVERED
        assert docket.pod_verified is True

    def test_update_with_docket_token_still_commits(self, engine, pod_image):
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            await engine.upload_image(session, pod_image)
            return await engine.submit_text(session, "update DKT-1002 please")

        emitted = asyncio.run(scenario())
        assert "DKT-1001" in emitted[-1].content
        assert session.state.active_docket.id == "DKT-1001"

    def test_store_failure_keeps_evidence(self, store, make_engine, pod_image):
        spy = MagicMock(wraps=store)
        spy.update.side_effect = StoreError("disk I/O error")
        engine = make_engine(store_=spy)
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1002")
            await engine.upload_image(session, pod_image)
            return await engine.submit_text(session, "Please update")

        emitted = asyncio.run(scenario())

        assert emitted[-1].content == COMMIT_FAILED
        assert session.state.stage == WorkflowStage.EVIDENCE_PENDING
        assert spy.update.call_count == 1


class TestFreeformAndReset:
    def test_freeform_relays_reply(self, engine, assistant):
        session = engine.open_session()
        emitted = asyncio.run(engine.submit_text(session, "What is a POD?"))

        assert emitted[-1].content == assistant.result.response
        assert assistant.calls == ["What is a POD?"]
        assert session.state.stage == WorkflowStage.NO_DOCKET

    def test_freeform_failure(self, engine, assistant):
        assistant.result = AgentResult(error="network down")
        session = engine.open_session()
        emitted = asyncio.run(engine.submit_text(session, "hello"))
        assert emitted[-1].content == FREEFORM_UNAVAILABLE

    def test_blank_input_ignored(self, engine, assistant):
        session = engine.open_session()
        assert asyncio.run(engine.submit_text(session, "   ")) == []
        assert len(session.messages) == 1
        assert assistant.calls == []

    def test_reset_discards_evidence(self, engine, pod_image):
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            await engine.upload_image(session, pod_image)
            return await engine.reset(session)

        emitted = asyncio.run(scenario())

        assert emitted[-1].content == RESET_CONFIRMATION
        assert session.state.stage == WorkflowStage.NO_DOCKET
        assert session.state.pending_evidence is None

    def test_lookup_of_other_docket_discards_evidence(self, engine, pod_image):
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            await engine.upload_image(session, pod_image)
            await engine.submit_text(session, "DKT-1002")

        asyncio.run(scenario())
        assert session.state.active_docket.id == "DKT-1002"
        assert session.state.pending_evidence is None


class TestConcurrency:
    def test_second_upload_rejected_while_verifying(self, make_engine, gated_verifier, wait_for, pod_image):
        engine = make_engine(verifier=gated_verifier)
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            first = asyncio.create_task(engine.upload_image(session, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 1)

            assert session.snapshot().verification_in_flight is True
            second = await engine.upload_image(session, pod_image)

            gated_verifier.release(0, AgentResult(response=GOOD))
            return await first, second

        first, second = asyncio.run(scenario())

        assert [m.content for m in second] == [UPLOAD_BUSY]
        assert len(gated_verifier.calls) == 1
        assert first[-1].status == "success"
        assert session.verification_in_flight is False
        assert session.state.stage == WorkflowStage.EVIDENCE_PENDING

    def test_text_handled_while_verifying(self, make_engine, gated_verifier, wait_for, pod_image, assistant):
        engine = make_engine(verifier=gated_verifier)
        session = engine.open_session()

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            task = asyncio.create_task(engine.upload_image(session, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 1)

            reply = await engine.submit_text(session, "how long does this take?")
            gated_verifier.release(0, AgentResult(response=GOOD))
            await task
            return reply

        reply = asyncio.run(scenario())

        assert reply[-1].content == assistant.result.response
        # The verdict lands on the loading message, not the latest reply.
        verdicts = [m for m in session.messages if m.status == "success"]
        assert len(verdicts) == 1
        assert session.messages[-1].content == assistant.result.response
        assert session.state.stage == WorkflowStage.EVIDENCE_PENDING

    def test_resolution_follows_identity_across_reset(self, make_engine, gated_verifier, wait_for, pod_image):
        engine = make_engine(verifier=gated_verifier)
        session = engine.open_session()
        seen = {}

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            first = asyncio.create_task(engine.upload_image(session, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 1)
            (first_loading,) = _loading(session)
            seen["first"] = first_loading.id

            await engine.reset(session)
            await engine.submit_text(session, "DKT-1002")
            latest_before = session.messages[-1]

            gated_verifier.release(0, AgentResult(response=GOOD))
            await first

            # Stale verdict is shown but does not become evidence for DKT-1002.
            assert session.state.pending_evidence is None
            assert session.messages[-1] == latest_before

            second = asyncio.create_task(engine.upload_image(session, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 2)
            (second_loading,) = _loading(session)
            seen["second"] = second_loading.id

            gated_verifier.release(1, AgentResult(response=BAD))
            await second

        asyncio.run(scenario())

        first = session.messages.get(seen["first"])
        second = session.messages.get(seen["second"])
        assert first.status == "success" and first.content == GOOD
        assert second.status == "success" and second.content == BAD
        assert gated_verifier.calls[1]["id"] == "DKT-1002"
        assert session.state.stage == WorkflowStage.DOCKET_ACTIVE

    def test_out_of_order_completion_across_sessions(self, make_engine, gated_verifier, wait_for, pod_image):
        engine = make_engine(verifier=gated_verifier)
        alpha = engine.open_session("alpha")
        beta = engine.open_session("beta")

        async def scenario():
            await engine.submit_text(alpha, "DKT-1001")
            await engine.submit_text(beta, "DKT-1003")
            a = asyncio.create_task(engine.upload_image(alpha, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 1)
            b = asyncio.create_task(engine.upload_image(beta, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 2)

            gated_verifier.release(1, AgentResult(response=GOOD))
            await b
            assert _loading(alpha) != []
            gated_verifier.release(0, AgentResult(error="timeout"))
            await a

        asyncio.run(scenario())

        assert alpha.messages[-1].status == "error"
        assert alpha.state.stage == WorkflowStage.DOCKET_ACTIVE
        assert beta.messages[-1].status == "success"
        assert beta.state.stage == WorkflowStage.EVIDENCE_PENDING
        assert beta.state.active_docket.id == "DKT-1003"

    def test_result_after_close_is_discarded(self, make_engine, gated_verifier, wait_for, pod_image):
        engine = make_engine(verifier=gated_verifier)
        session = engine.open_session("gone")

        async def scenario():
            await engine.submit_text(session, "DKT-1001")
            task = asyncio.create_task(engine.upload_image(session, pod_image))
            await wait_for(lambda: len(gated_verifier.calls) == 1)

            engine.close_session("gone")
            gated_verifier.release(0, AgentResult(response=GOOD))
            return await task

        emitted = asyncio.run(scenario())

        assert [m.role for m in emitted] == ["user"]
        assert len(_loading(session)) == 1
        assert session.state.pending_evidence is None
        assert "gone" not in engine.registry

    def test_closed_session_ignores_events(self, engine):
        session = engine.open_session("s")
        engine.close_session("s")
        assert asyncio.run(engine.submit_text(session, "DKT-1001")) == []
        assert session.state.active_docket is None
