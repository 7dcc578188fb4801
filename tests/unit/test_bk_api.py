"""HTTP API tests through httpx ASGITransport with the in-memory store."""

from decimal import Decimal

from httpx import AsyncClient

from src.bk_ledger.application.service import LedgerStore
from tests.helpers.fakes import FakeGoalRepository, FakeLedgerRepository

ENTRY = {
    "created_date": "01/03/2025",
    "legs": [{"event_date": "2025-03-01", "modality": "Soccer", "description": "A x B",
              "market": "ML", "selection": "A"}],
    "odd": "2.00",
    "stake": "50",
    "result": "WIN",
    "site": "Bet365",
}

THREE_ROWS = (
    "01/03/2025,Soccer,01/03/2025,A x B,ML,A,2.00,100,G,100\n"
    "31/13/2025,Soccer,01/03/2025,C x D,ML,C,1.80,50,P,-50\n"
    "03/03/2025,Tennis,03/03/2025,X x Y,Winner,X,1.50,50,P,-50\n"
)


async def _account(client: AsyncClient, name: str = "Main", initial: str = "100") -> dict:
    resp = await client.post("/api/v1/accounts", json={"name": name, "initial_balance": initial})
    assert resp.status_code == 201
    return resp.json()["data"]


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestAccountsApi:
    async def test_create_and_list(self, client: AsyncClient) -> None:
        created = await _account(client)
        assert created["balance"] == "100.00"
        assert created["balance_display"] == "R$ 100,00"

        body = (await client.get("/api/v1/accounts")).json()
        assert body["code"] == 0
        assert [a["id"] for a in body["data"]] == [created["id"]]

    async def test_unknown_account_envelope(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/accounts/nope")
        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == 2001
        assert body["data"] is None
        assert body["request_id"].startswith("req_")

    async def test_edit_and_delete(self, client: AsyncClient, ledger_store: LedgerStore) -> None:
        created = await _account(client)
        resp = await client.put(
            f"/api/v1/accounts/{created['id']}",
            json={"name": "Renamed", "balance": "80", "initial_balance": "80"},
        )
        assert resp.json()["data"]["name"] == "Renamed"

        resp = await client.delete(f"/api/v1/accounts/{created['id']}")
        assert resp.status_code == 200
        assert ledger_store.accounts == []


class TestEntriesApi:
    async def test_create_derives_profit_and_updates_balance(
        self, client: AsyncClient, ledger_store: LedgerStore
    ) -> None:
        account = await _account(client)

        resp = await client.post("/api/v1/entries", json=ENTRY)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["profit"] == "50.00"
        assert data["created_date"] == "2025-03-01"
        assert ledger_store.get_account(account["id"]).balance == Decimal("150.00")

    async def test_overview_with_two_accounts_rejects_create(self, client: AsyncClient) -> None:
        await _account(client, "A")
        await _account(client, "B")
        resp = await client.post("/api/v1/entries", json=ENTRY)
        assert resp.status_code == 409
        assert resp.json()["code"] == 4001

    async def test_invalid_date(self, client: AsyncClient) -> None:
        await _account(client)
        resp = await client.post("/api/v1/entries", json={**ENTRY, "created_date": "31/13/2025"})
        assert resp.status_code == 422
        assert resp.json()["code"] == 1001

    async def test_oversized_stake_is_a_validation_error(
        self, client: AsyncClient, ledger_repo: FakeLedgerRepository
    ) -> None:
        await _account(client)

        derived = await client.post("/api/v1/entries", json={**ENTRY, "stake": "1e30"})
        explicit = await client.post(
            "/api/v1/entries", json={**ENTRY, "stake": "1e30", "profit": "10"}
        )

        for resp in (derived, explicit):
            assert resp.status_code == 422
            assert resp.json()["code"] == 1001
        assert ledger_repo.insert_calls == []

    async def test_update_and_delete(self, client: AsyncClient, ledger_store: LedgerStore) -> None:
        account = await _account(client)
        entry = (await client.post("/api/v1/entries", json=ENTRY)).json()["data"]

        resp = await client.put(
            f"/api/v1/entries/{entry['id']}", json={**ENTRY, "result": "LOSS"}
        )
        assert resp.json()["data"]["profit"] == "-50.00"
        assert ledger_store.get_account(account["id"]).balance == Decimal("50.00")

        await client.delete(f"/api/v1/entries/{entry['id']}")
        assert ledger_store.get_account(account["id"]).balance == Decimal("100.00")

    async def test_unknown_entry(self, client: AsyncClient) -> None:
        resp = await client.delete("/api/v1/entries/missing")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001

    async def test_list_with_filter(self, client: AsyncClient) -> None:
        await _account(client)
        await client.post("/api/v1/entries", json=ENTRY)
        await client.post("/api/v1/entries", json={**ENTRY, "result": "LOSS", "site": "Betano"})

        body = (await client.get("/api/v1/entries", params={"site": "Betano"})).json()

        assert body["data"]["total"] == 1
        assert body["data"]["items"][0]["result"] == "LOSS"
        assert body["data"]["filtered"] is True
        assert body["data"]["items"][0]["multi_leg"] is False


class TestCsvApi:
    async def test_import_reports_rejections(
        self, client: AsyncClient, ledger_store: LedgerStore
    ) -> None:
        account = await _account(client)

        resp = await client.post("/api/v1/csv/import", json={"content": THREE_ROWS})

        data = resp.json()["data"]
        assert data["accepted"] == 2
        assert data["rejected"] == [{"row": 2, "reason": "invalid date"}]
        assert data["summary"].startswith("2 accepted, 1 rejected")
        assert ledger_store.get_account(account["id"]).balance == Decimal("150.00")

    async def test_store_failure_keeps_rejection_report(
        self, client: AsyncClient, ledger_repo: FakeLedgerRepository, ledger_store: LedgerStore
    ) -> None:
        account = await _account(client)
        ledger_repo.fail_insert_on_call = 1

        resp = await client.post("/api/v1/csv/import", json={"content": THREE_ROWS})

        assert resp.status_code == 503
        body = resp.json()
        assert body["code"] == 9001
        assert body["data"]["succeeded"] == 0
        assert body["data"]["total"] == 2
        assert body["data"]["rejected"] == [{"row": 2, "reason": "invalid date"}]
        assert body["data"]["summary"].startswith("2 accepted, 1 rejected (row 2: invalid date")
        assert ledger_store.get_account(account["id"]).balance == Decimal("100.00")

    async def test_export(self, client: AsyncClient) -> None:
        await _account(client, "Main Bank")
        await client.post("/api/v1/entries", json=ENTRY)

        resp = await client.get("/api/v1/csv/export")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "entries_Main_Bank_" in resp.headers["content-disposition"]
        assert resp.text.startswith("\ufeff")
        assert '"Ganha"' in resp.text


class TestSelectionApi:
    async def test_toggle_and_overview(self, client: AsyncClient) -> None:
        a = await _account(client, "A")
        b = await _account(client, "B")

        data = (await client.post(f"/api/v1/selection/toggle/{a['id']}")).json()["data"]
        assert data["view_mode"] == "SPECIFIC"
        assert data["account_ids"] == [b["id"]]
        assert data["target_account_id"] == b["id"]

        data = (await client.post("/api/v1/selection/overview")).json()["data"]
        assert data["view_mode"] == "OVERVIEW"
        assert data["target_account_id"] is None


class TestMetricsApi:
    async def test_dashboard(self, client: AsyncClient) -> None:
        await _account(client)
        await client.post("/api/v1/entries", json=ENTRY)

        data = (await client.get("/api/v1/metrics/dashboard")).json()["data"]

        assert data["has_data"] is True
        assert data["metrics"]["total_pnl"] == "50.00"
        assert data["bankroll_history"][0]["value"] == "150.00"
        assert len(data["recent_entries"]) == 1

    async def test_statistics_and_accounts(self, client: AsyncClient) -> None:
        await _account(client)
        await client.post("/api/v1/entries", json=ENTRY)

        stats = (
            await client.get("/api/v1/metrics/statistics", params={"year": 2025, "month": 3})
        ).json()["data"]
        assert stats["month_summary"]["days_with_bets"] == 1
        assert stats["modality_stats"][0]["name"] == "Soccer"

        accounts = (await client.get("/api/v1/metrics/accounts")).json()["data"]
        assert accounts[0]["roi"] == "50.00"


class TestGoalsApi:
    async def test_set_and_read_progress(
        self, client: AsyncClient, goal_repo: FakeGoalRepository
    ) -> None:
        account = await _account(client)
        await client.post("/api/v1/entries", json=ENTRY)

        resp = await client.put(
            "/api/v1/metrics/goals", json={"year": 2025, "month": 3, "target": "200"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["percentage"] == "25.00"

        await client.put("/api/v1/metrics/goals", json={"year": 2025, "target": "40"})
        data = (
            await client.get("/api/v1/metrics/goals", params={"year": 2025})
        ).json()["data"]

        assert data["account_id"] == account["id"]
        assert data["annual"]["current"] == "50.00"
        assert data["annual"]["percentage"] == "100.00"
        assert data["annual"]["achieved"] is True
        march = data["monthly"][2]
        assert march["month"] == 3
        assert march["target"] == "200.00"
        assert [m["has_goal"] for m in data["monthly"]].count(True) == 1
        assert len(goal_repo.goals) == 2

    async def test_combined_view_uses_shared_goal(
        self, client: AsyncClient, goal_repo: FakeGoalRepository
    ) -> None:
        await _account(client, "A")
        await _account(client, "B")

        await client.put("/api/v1/metrics/goals", json={"year": 2025, "target": "100"})

        assert list(goal_repo.goals) == [(None, 2025, None)]

    async def test_rejects_non_positive_target(self, client: AsyncClient) -> None:
        resp = await client.put("/api/v1/metrics/goals", json={"year": 2025, "target": "0"})
        assert resp.status_code == 422
