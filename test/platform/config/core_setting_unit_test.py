import pytest

from src.platform.config.core_setting import Settings
from src.platform.constant.path import BASE_DIR


@pytest.mark.unit
class TestSettings:
    def test_env_example_loads(self) -> None:
        example = Settings(_env_file=BASE_DIR / '.env.example')  # type: ignore[call-arg]

        assert example.BACKEND_CORS_ORIGINS == ['http://localhost:3000']
        assert example.SEED_FILE == 'script/seed/demo_event.json'

    @pytest.mark.parametrize(
        'raw, expected',
        [
            ('http://a.test, http://b.test', ['http://a.test', 'http://b.test']),
            ('["http://a.test", "http://b.test"]', ['http://a.test', 'http://b.test']),
        ],
        ids=['comma-separated', 'json-list'],
    )
    def test_cors_origins_from_environment(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]
    ) -> None:
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', raw)

        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == expected  # type: ignore[call-arg]
