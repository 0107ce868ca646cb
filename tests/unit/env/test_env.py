import pytest

from statusgate.env import Env, TimeParser, load_env


ENV_NAMES = list(Env.types_map())


@pytest.fixture
def clean_environ(monkeypatch: pytest.MonkeyPatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)

    return monkeypatch


class TestTimeParser:
    @pytest.mark.parametrize(
        "amount,seconds",
        [
            ("10s", 10.0),
            ("2.5s", 2.5),
            ("1m30s", 90.0),
            ("1h", 3600.0),
            ("15", 15.0),
        ],
    )
    def test_parses_durations(self, amount: str, seconds: float):
        assert TimeParser(amount).time == seconds

    def test_milliseconds(self):
        assert TimeParser("250ms").time == pytest.approx(0.25)

    def test_rejects_text_without_a_number(self):
        with pytest.raises(ValueError):
            TimeParser("soon")


class TestEnv:
    def test_defaults(self):
        env = Env()

        assert TimeParser(env.PROBER_POLL_INTERVAL).time == 10.0
        assert env.get_proxy_url() == "http://localhost:8080/jolokia"
        assert env.get_local_regions() == []
        assert env.get_all_regions_ingress_domains() is None

    def test_explicit_proxy_url_wins(self):
        env = Env(JMX_PROXY_URL="http://proxy:9999/jolokia", JOLOKIA_PORT=1)

        assert env.get_proxy_url() == "http://proxy:9999/jolokia"

    def test_local_regions_accept_names_or_objects(self):
        env = Env(LOCAL_REGIONS='[{"name": "east", "replicas": 3}, "west"]')

        assert env.get_local_regions() == ["east", "west"]

    def test_seed_hostnames_are_short_names(self):
        env = Env(SEED_HOSTNAMES="db-0.db.default.svc, db-1.db.default.svc,,")

        assert env.get_seed_hostnames() == ["db-0", "db-1"]


class TestLoadEnv:
    def test_reads_process_environment(self, clean_environ: pytest.MonkeyPatch, tmp_path):
        clean_environ.setenv("SERVER_PORT", "9001")
        clean_environ.setenv("PROBER_POLL_INTERVAL", "5s")

        env = load_env(Env, env_file=str(tmp_path / "missing.env"))

        assert env.SERVER_PORT == 9001
        assert env.PROBER_POLL_INTERVAL == "5s"

    def test_reads_dotenv_file(self, clean_environ: pytest.MonkeyPatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("LOG_LEVEL=debug\nJMX_PORT=7200\nUNRELATED=1\n")

        env = load_env(Env, env_file=str(env_file))

        assert env.LOG_LEVEL == "debug"
        assert env.JMX_PORT == 7200

    def test_process_environment_overrides_file(
        self,
        clean_environ: pytest.MonkeyPatch,
        tmp_path,
    ):
        env_file = tmp_path / ".env"
        env_file.write_text("SERVER_PORT=9002\n")
        clean_environ.setenv("SERVER_PORT", "9003")

        assert load_env(Env, env_file=str(env_file)).SERVER_PORT == 9003
