"""
Тесты роутов телеметрии и интерполяции по кривой уровень/объём
"""
import pytest

from srmt_admin.core.errors import IndicatorNotFoundError, LevelOutOfCurveRangeError
from srmt_admin.modules.telemetry.dependencies import get_reservoir_repo
from srmt_admin.modules.telemetry.models import LevelVolume
from srmt_admin.modules.telemetry.services.repository import ReservoirRepository

READING = {"current": 12.0, "resistance": 120.0, "time": "2024-05-01T10:00:00Z"}


class FakeReservoirRepo:
    def __init__(self, indicator=10.0, volume=123.4, volume_error=None):
        self.indicator = indicator
        self.volume = volume
        self.volume_error = volume_error
        self.calls = []
        self.saved = []

    def get_indicator(self, res_id):
        self.calls.append(("get_indicator", res_id))
        if self.indicator is None:
            raise IndicatorNotFoundError(str(res_id))
        return self.indicator

    def get_volume_by_level(self, res_id, level):
        self.calls.append(("get_volume_by_level", res_id, level))
        if self.volume_error:
            raise self.volume_error
        return self.volume

    def save_data(self, measurement):
        self.calls.append(("save_data", measurement.reservoir_id))
        self.saved.append(measurement)
        return 1

    def save_andijan_data(self, time, current, resistance):
        self.calls.append(("save_andijan_data", current, resistance))
        return 1


def test_set_data_converts_and_saves(client, override, api_key_headers):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/1", json=READING, headers=api_key_headers)

    assert response.status_code == 201
    assert response.content == b""
    saved = repo.saved[0]
    assert saved.level == 30.62
    assert saved.volume == 123.4
    assert saved.time is not None
    assert ("get_volume_by_level", 1, 30.62) in repo.calls


def test_set_data_unsupported_reservoir_makes_no_repository_call(client, override, api_key_headers):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/7", json=READING, headers=api_key_headers)

    assert response.status_code == 400
    assert "7" in response.json()["error"]
    assert repo.calls == []


def test_set_data_requires_api_key(client, override):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/1", json=READING, headers={"X-API-Key": "wrong"})

    assert response.status_code == 401
    assert repo.calls == []


def test_set_data_indicator_missing(client, override, api_key_headers):
    override(get_reservoir_repo, FakeReservoirRepo(indicator=None))

    response = client.post("/api/v1/data/1", json=READING, headers=api_key_headers)

    assert response.status_code == 404
    assert response.json() == {"status": 404, "error": "indicator level not found"}


def test_set_data_level_out_of_curve(client, override, api_key_headers):
    repo = FakeReservoirRepo(volume_error=LevelOutOfCurveRangeError("30.62"))
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/1", json=READING, headers=api_key_headers)

    assert response.status_code == 400
    assert not repo.saved


def test_set_data_invalid_json(client, override, api_key_headers):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post(
        "/api/v1/data/1",
        content=b"{not json",
        headers={**api_key_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request format"
    assert repo.calls == []


@pytest.mark.parametrize("field", ["current", "resistance"])
def test_set_data_zero_reading_is_missing(client, override, api_key_headers, field):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/1", json={**READING, field: 0}, headers=api_key_headers)

    assert response.status_code == 400
    assert response.json()["errors"] == [f"field '{field}' is required"]
    assert repo.calls == []


def test_andijan_raw_data(client, override, api_key_headers):
    repo = FakeReservoirRepo()
    override(get_reservoir_repo, repo)

    response = client.post("/api/v1/data/andijan", json=READING, headers=api_key_headers)

    assert response.status_code == 201
    assert repo.calls == [("save_andijan_data", 12.0, 120.0)]


def test_add_reservoir_requires_sc_role(client, override, auth_headers):
    override(get_reservoir_repo, FakeReservoirRepo())

    response = client.post("/api/v1/reservoirs", json={"name": "Чарвак"}, headers=auth_headers("hr"))

    assert response.status_code == 403


# --- Кривая уровень/объём на SQLite ---


@pytest.fixture
def curve_repo(db_session):
    repo = ReservoirRepository(db_session)
    res_id = repo.add_reservoir("Андижан")
    for level, volume in [(10.0, 100.0), (20.0, 300.0), (30.0, 600.0)]:
        db_session.add(LevelVolume(res_id=res_id, level=level, volume=volume))
    db_session.commit()
    return repo, res_id


def test_volume_interpolates_between_points(curve_repo):
    repo, res_id = curve_repo
    assert repo.get_volume_by_level(res_id, 15.0) == pytest.approx(200.0)
    assert repo.get_volume_by_level(res_id, 27.5) == pytest.approx(525.0)


def test_volume_exact_level(curve_repo):
    repo, res_id = curve_repo
    assert repo.get_volume_by_level(res_id, 20.0) == 300.0


@pytest.mark.parametrize("level", [5.0, 30.01])
def test_volume_out_of_curve(curve_repo, level):
    repo, res_id = curve_repo
    with pytest.raises(LevelOutOfCurveRangeError):
        repo.get_volume_by_level(res_id, level)


def test_indicator_upsert(curve_repo):
    repo, res_id = curve_repo
    with pytest.raises(IndicatorNotFoundError):
        repo.get_indicator(res_id)
    first = repo.set_indicator(res_id, 10.5)
    second = repo.set_indicator(res_id, 11.0)
    assert first == second
    assert repo.get_indicator(res_id) == 11.0


def test_level_volume_missing_point_returns_zeros(curve_repo):
    repo, res_id = curve_repo
    point = repo.get_level_volume(res_id, 12.0)
    assert (point.reservoir_id, point.level, point.volume) == (0, 0.0, 0.0)
