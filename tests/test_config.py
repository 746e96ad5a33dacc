import pytest

from medcare import create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FLASK_SECRET_KEY", "JWT_SECRET", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)


def test_production_refuses_default_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    with pytest.raises(RuntimeError, match="default secret key"):
        create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://"})


def test_production_refuses_default_jwt_secret():
    with pytest.raises(RuntimeError):
        create_app({"ENV": "production", "SECRET_KEY": "a-real-secret", "JWT_SECRET": "dev_secret_key_123!@#",
                    "SQLALCHEMY_DATABASE_URI": "sqlite://"})


def test_production_with_own_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("FLASK_SECRET_KEY", "a-real-secret")
    app = create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://"})
    assert app.config["JWT_SECRET"] == "a-real-secret"


def test_development_keeps_default_secret():
    app = create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://"})
    assert app.config["ENV"] == "development"
    assert app.config["JWT_SECRET"] == app.config["SECRET_KEY"]
