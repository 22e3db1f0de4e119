from core.config import BackendSettings, Config
from core.request_types import Backend, BodyStrategy
from services.targets import build_targets, service_addresses


def test_one_target_per_backend():
    targets = build_targets(Config())

    assert set(targets) == set(Backend)
    assert targets[Backend.MEDICAL_RECORDS].base_url == "http://localhost:3005"


def test_timeout_classes():
    target = build_targets(Config())[Backend.MEDICAL_RECORDS]

    assert target.timeout_for(BodyStrategy.JSON) == 15.0
    assert target.timeout_for(BodyStrategy.STREAM_IN) == 15.0
    assert target.timeout_for(BodyStrategy.STREAM_OUT) == 30.0


def test_per_backend_timeout_override():
    config = Config()
    config.services.audit = BackendSettings(base_url="http://audit:3006", timeout=45.0)

    target = build_targets(config)[Backend.AUDIT]

    assert target.timeout == 45.0
    assert target.download_timeout == 45.0


def test_url_keeps_path_and_query():
    target = build_targets(Config())[Backend.USER]

    assert target.url_for("/api/v1/users?role=doctor&page=2") == (
        "http://localhost:3003/api/v1/users?role=doctor&page=2"
    )


def test_service_addresses_for_health():
    assert service_addresses(build_targets(Config())) == {
        "auth": "http://localhost:3002",
        "user": "http://localhost:3003",
        "organization": "http://localhost:3004",
        "medicalRecords": "http://localhost:3005",
        "audit": "http://localhost:3006",
    }
