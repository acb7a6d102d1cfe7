"""HTTP tests for terminals, storage rules and charge computation."""

from decimal import Decimal

from fastapi.concurrency import run_in_threadpool

from app.api import storage_rules as storage_rules_api
from app.api import terminals as terminals_api
from tests.factories import rule_payload


def create_terminal(client, name="Santos Brasil", code="8931356"):
    r = client.post("/terminals/", json={"name": name, "code": code})
    assert r.status_code == 201, r.text
    return r.json()


def create_rule(client, terminal_id, **kwargs):
    return client.post(f"/terminals/{terminal_id}/storage-rules", json=rule_payload(**kwargs))


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestTerminals:

    def test_crud(self, client):
        terminal = create_terminal(client)

        r = client.put(f"/terminals/{terminal['id']}", json={"name": "  Santos Brasil Tecon  ", "code": ""})
        assert r.status_code == 200
        assert r.json()["name"] == "Santos Brasil Tecon"
        assert r.json()["code"] is None

        names = [t["name"] for t in client.get("/terminals/").json()]
        assert names == ["Santos Brasil Tecon"]

        assert client.delete(f"/terminals/{terminal['id']}").status_code == 204
        assert client.get(f"/terminals/{terminal['id']}").status_code == 404

    def test_blank_name_is_rejected(self, client):
        r = client.post("/terminals/", json={"name": "   "})
        assert r.status_code == 422
        assert r.json()["detail"]["field"] == "name"

    def test_terminal_detail_lists_rules(self, client):
        terminal = create_terminal(client)
        create_rule(client, terminal["id"])
        create_rule(client, terminal["id"], shipment_type="LCL", container_type=None)

        body = client.get(f"/terminals/{terminal['id']}").json()

        assert len(body["storage_rules"]) == 2
        assert {r["shipment_type"] for r in body["storage_rules"]} == {"FCL", "LCL"}

    def test_delete_cascades_rules(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        client.delete(f"/terminals/{terminal['id']}")

        assert client.get(f"/storage-rules/{rule['id']}").status_code == 404


class TestStorageRules:

    def test_create_returns_rates_in_percentage_points(self, client):
        terminal = create_terminal(client)

        r = create_rule(client, terminal["id"], min_value="1.234,50")

        assert r.status_code == 201, r.text
        body = r.json()
        assert body["container_type"] == "GP_20"
        assert Decimal(body["min_value"]) == Decimal("1234.50")
        assert Decimal(body["periods"][0]["rate"]) == Decimal("1")
        assert Decimal(body["periods"][1]["rate"]) == Decimal("250")
        assert body["coverage_gaps"] == []

    def test_fcl_without_container_is_rejected(self, client):
        terminal = create_terminal(client)

        r = create_rule(client, terminal["id"], container_type=None)

        assert r.status_code == 422

    def test_overlapping_periods_are_rejected(self, client):
        terminal = create_terminal(client)
        periods = [
            {"days_from": 0, "days_to": 10, "charge_type": "FIXED", "rate": "10"},
            {"days_from": 10, "days_to": None, "charge_type": "FIXED", "rate": "20"},
        ]

        r = create_rule(client, terminal["id"], periods=periods)

        assert r.status_code == 422
        assert r.json()["detail"]["code"] == "validation_error"
        assert client.get(f"/terminals/{terminal['id']}/storage-rules").json() == []

    def test_duplicate_key_returns_conflict(self, client):
        terminal = create_terminal(client)
        first = create_rule(client, terminal["id"]).json()

        r = create_rule(client, terminal["id"])

        assert r.status_code == 409
        detail = r.json()["detail"]
        assert detail["code"] == "rule_conflict"
        assert detail["conflicting_rule_id"] == first["id"]
        assert detail["message"] == "Já existe uma regra FCL para o container GP_20 neste terminal."

    def test_gaps_are_reported(self, client):
        terminal = create_terminal(client)
        periods = [
            {"days_from": 0, "days_to": 9, "charge_type": "FIXED", "rate": "10"},
            {"days_from": 20, "days_to": None, "charge_type": "FIXED", "rate": "20"},
        ]

        body = create_rule(client, terminal["id"], periods=periods).json()

        assert body["coverage_gaps"] == [{"days_from": 10, "days_to": 19}]

    def test_negative_min_value_behind_currency_is_rejected(self, client):
        terminal = create_terminal(client)

        r = create_rule(client, terminal["id"], min_value="R$ -500")

        assert r.status_code == 422
        assert client.get(f"/terminals/{terminal['id']}/storage-rules").json() == []

    def test_fractional_percentage_round_trips(self, client):
        terminal = create_terminal(client)
        periods = [{"days_from": 0, "days_to": None, "charge_type": "PERCENTAGE", "rate": "0.12345"}]

        rule = create_rule(client, terminal["id"], periods=periods).json()
        body = client.get(f"/storage-rules/{rule['id']}").json()

        assert Decimal(body["periods"][0]["rate"]) == Decimal("0.12345")

    def test_update_and_delete(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        r = client.put(f"/storage-rules/{rule['id']}", json=rule_payload(min_value="500"))
        assert r.status_code == 200
        assert Decimal(r.json()["min_value"]) == Decimal("500")

        assert client.delete(f"/storage-rules/{rule['id']}").status_code == 204
        assert client.delete(f"/storage-rules/{rule['id']}").status_code == 404

    def test_update_missing_rule(self, client):
        r = client.put("/storage-rules/999", json=rule_payload())
        assert r.status_code == 404
        assert r.json()["detail"]["message"] == "Regra não encontrada."

    def test_duplicate_then_save_conflicts(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"], shipment_type="FCL_PARTIAL", container_type=None).json()

        r = client.post(f"/storage-rules/{rule['id']}/duplicate")
        assert r.status_code == 200
        draft = r.json()["draft"]
        assert draft["shipment_type"] == "FCL_PARTIAL"
        assert len(client.get(f"/terminals/{terminal['id']}/storage-rules").json()) == 1

        saved = client.post(f"/terminals/{terminal['id']}/storage-rules", json=draft)
        assert saved.status_code == 409
        assert saved.json()["detail"]["message"] == "Já existe uma regra FCL Parcial para este terminal."


class TestCharges:

    def test_daily_percentage_charge(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        r = client.post(f"/storage-rules/{rule['id']}/charge", json={"elapsed_days": 5, "cargo_value": "10000"})

        assert r.status_code == 200, r.text
        body = r.json()
        assert body["billable_days"] == 6
        assert Decimal(body["storage_base"]) == Decimal("600")
        assert Decimal(body["total"]) == Decimal("600")
        assert body["period"]["days_from"] == 0

    def test_charge_by_key_with_fees_and_insurance(self, client):
        terminal = create_terminal(client)
        fees = [{"name": "Desova", "value": "350", "basis": "PER_WM"}]
        periods = [{"days_from": 0, "days_to": None, "charge_type": "FIXED", "rate": "100", "is_daily_rate": False}]
        create_rule(
            client,
            terminal["id"],
            shipment_type="LCL",
            container_type=None,
            cif_insurance="2",
            min_value="500",
            additional_fees=fees,
            periods=periods,
        )

        r = client.post(
            f"/terminals/{terminal['id']}/storage-charge",
            json={"shipment_type": "LCL", "elapsed_days": 12, "cargo_value": 1000},
        )

        assert r.status_code == 200, r.text
        body = r.json()
        assert Decimal(body["storage_base"]) == Decimal("100")
        assert Decimal(body["storage_charge"]) == Decimal("500")
        assert body["min_value_applied"] is True
        assert Decimal(body["insurance_add_on"]) == Decimal("20")
        assert Decimal(body["total"]) == Decimal("520")
        assert body["additional_fees"][0]["basis"] == "PER_WM"

    def test_gap_is_reported_not_zeroed(self, client):
        terminal = create_terminal(client)
        periods = [
            {"days_from": 0, "days_to": 9, "charge_type": "FIXED", "rate": "10"},
            {"days_from": 20, "days_to": None, "charge_type": "FIXED", "rate": "20"},
        ]
        rule = create_rule(client, terminal["id"], periods=periods).json()

        r = client.post(f"/storage-rules/{rule['id']}/charge", json={"elapsed_days": 15, "cargo_value": 1000})

        assert r.status_code == 422
        assert r.json()["detail"]["code"] == "no_matching_period"
        assert r.json()["detail"]["elapsed_days"] == 15

    def test_missing_rule_for_key(self, client):
        terminal = create_terminal(client)

        r = client.post(
            f"/terminals/{terminal['id']}/storage-charge",
            json={"shipment_type": "FCL", "container_type": "RF_40", "elapsed_days": 1},
        )

        assert r.status_code == 404

    def test_fcl_key_requires_container(self, client):
        terminal = create_terminal(client)

        r = client.post(
            f"/terminals/{terminal['id']}/storage-charge",
            json={"shipment_type": "FCL", "elapsed_days": 1},
        )

        assert r.status_code == 422

    def test_negative_days_rejected(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        r = client.post(f"/storage-rules/{rule['id']}/charge", json={"elapsed_days": -1})

        assert r.status_code == 422

    def test_cargo_value_converted_with_given_rate(self, client):
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        r = client.post(
            f"/storage-rules/{rule['id']}/charge",
            json={"elapsed_days": 0, "cargo_value": "2000", "cargo_currency": "USD", "exchange_rate": "5"},
        )

        body = r.json()
        assert r.status_code == 200, r.text
        assert Decimal(body["cargo_value"]) == Decimal("10000")
        assert body["cargo_currency"] == "USD"
        assert body["currency"] == "BRL"
        # 1% de 10000 por 1 dia
        assert Decimal(body["total"]) == Decimal("100")

    def test_charge_routes_load_rules_in_threadpool(self, client, monkeypatch):
        loaded = []

        async def tracking_threadpool(func, *args, **kwargs):
            loaded.append(func.__name__)
            return await run_in_threadpool(func, *args, **kwargs)

        monkeypatch.setattr(storage_rules_api, "run_in_threadpool", tracking_threadpool)
        monkeypatch.setattr(terminals_api, "run_in_threadpool", tracking_threadpool)
        terminal = create_terminal(client)
        rule = create_rule(client, terminal["id"]).json()

        by_id = client.post(f"/storage-rules/{rule['id']}/charge", json={"elapsed_days": 1, "cargo_value": 100})
        by_key = client.post(
            f"/terminals/{terminal['id']}/storage-charge",
            json={"shipment_type": "FCL", "container_type": "GP_20", "elapsed_days": 1, "cargo_value": 100},
        )

        assert by_id.status_code == 200, by_id.text
        assert by_key.json()["total"] == by_id.json()["total"]
        assert loaded == ["load_rule_terms", "load_rule_terms_by_key"]
