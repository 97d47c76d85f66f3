"""Pytest configuration and shared fixtures."""

import pytest

from stakekit.config import NetworkDeployment
from stakekit.descriptors import ResourcePlan
from stakekit.models import ClientHandle, ClientKind
from stakekit.deferred import Deferred


@pytest.fixture
def plan():
    return ResourcePlan("prater")


@pytest.fixture
def make_deployment():
    """Build a NetworkDeployment with a node password already filled in"""
    def _make(network="prater", execution=("erigon",), consensus=("lighthouse",), **kwargs):
        kwargs.setdefault("rocketpool", {"node_password": "hunter2"})
        return NetworkDeployment(
            network=network,
            execution=list(execution),
            consensus=list(consensus),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_handle():
    def _make(name, url, kind=ClientKind.EXECUTION, ws=None):
        return ClientHandle(
            name=name,
            kind=kind,
            enabled=True,
            endpoint=Deferred.of(url),
            secondary_endpoint=Deferred.of(ws) if ws else None,
        )
    return _make


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep user config files and STAKEKIT_* variables out of every test"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in ("STAKEKIT_DEPLOYMENT_FILE", "STAKEKIT_OUTPUT_DIR", "STAKEKIT_DEFAULT_NETWORK", "STAKEKIT_PLUGINS_DIR"):
        monkeypatch.delenv(key, raising=False)
    return home
