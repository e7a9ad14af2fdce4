import pytest
from sqlalchemy import create_engine, inspect

from shopbridge import __main__ as cli
from shopbridge.seed import CATALOG


class TestParser:
    def test_serve_options(self):
        args = cli.build_parser().parse_args(["serve", "--port", "7000"])

        assert args.handler is cli._serve
        assert args.port == 7000
        assert args.host is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestInitDb:
    @pytest.fixture
    def db_url(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'shop.db'}"
        monkeypatch.setenv("DATABASE_URL", url)
        monkeypatch.setenv("WEBHOOK_MODE", "log")
        monkeypatch.chdir(tmp_path)
        return url

    def test_init_db_with_seed_is_repeatable(self, db_url, capsys):
        assert cli.main(["init-db", "--seed"]) == 0
        assert cli.main(["init-db", "--seed"]) == 0

        engine = create_engine(db_url)
        assert "cart_items" in inspect(engine).get_table_names()
        with engine.connect() as conn:
            count = conn.exec_driver_sql("SELECT COUNT(*) FROM products").scalar()
        engine.dispose()
        assert count == len(CATALOG)
        assert "Seed completed: 0 product(s) added." in capsys.readouterr().out

    def test_bad_config_exits_2(self, db_url, monkeypatch):
        monkeypatch.setenv("WEBHOOK_MODE", "carrier-pigeon")

        assert cli.main(["init-db"]) == 2
