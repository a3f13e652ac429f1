# backend.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import streamlit as st

from storage.memory import InMemoryRecordStore
from storage.repo import SleepRepo


# ----------------------------
# Config
# ----------------------------

@dataclass(frozen=True)
class AppConfig:
    backend: str = "memory"  # memory | gsheets
    spreadsheet_name: str = "SleepTracker_DB"
    timezone: str = "UTC"


def _read_secrets() -> Dict[str, Any]:
    try:
        return {k: st.secrets[k] for k in st.secrets.keys()}
    except Exception:
        # no secrets.toml at all
        return {}


def load_app_config(secrets: Mapping[str, Any] | None = None) -> AppConfig:
    """
    Reads the [sleeptracker] table of Streamlit secrets:
      backend = "gsheets"
      spreadsheet_name = "SleepTracker_DB"
      timezone = "Europe/Berlin"
    The gsheets backend also needs st.secrets["gcp_service_account"];
    without it the app falls back to the in-memory store.
    """
    raw = dict(secrets) if secrets is not None else _read_secrets()
    section = dict(raw.get("sleeptracker", {}) or {})
    backend = str(section.get("backend", "memory") or "memory").strip().lower()
    if backend not in ("memory", "gsheets"):
        backend = "memory"
    if backend == "gsheets" and "gcp_service_account" not in raw:
        backend = "memory"
    return AppConfig(
        backend=backend,
        spreadsheet_name=str(section.get("spreadsheet_name", "SleepTracker_DB") or "SleepTracker_DB"),
        timezone=str(section.get("timezone", "UTC") or "UTC"),
    )


def app_timezone(cfg: AppConfig) -> ZoneInfo:
    try:
        return ZoneInfo(cfg.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


# ----------------------------
# Repo factory
# ----------------------------

def make_gspread_client_from_secrets():
    """
    Expects Streamlit secrets:
      st.secrets["gcp_service_account"] = { ... service account json ... }
    gspread is an optional extra, so it is imported here.
    """
    try:
        import gspread
        from google.oauth2.service_account import Credentials
    except ImportError as e:
        raise RuntimeError("The gsheets backend needs the 'sheets' extra (gspread, google-auth).") from e

    if "gcp_service_account" not in st.secrets:
        raise RuntimeError("Missing st.secrets['gcp_service_account'] for Google service account credentials.")

    creds = Credentials.from_service_account_info(
        st.secrets["gcp_service_account"],
        scopes=[
            "https://www.googleapis.com/auth/spreadsheets",
            "https://www.googleapis.com/auth/drive",
        ],
    )
    return gspread.authorize(creds)


def build_repo(cfg: AppConfig) -> SleepRepo:
    tz = app_timezone(cfg)
    if cfg.backend == "gsheets":
        gc = make_gspread_client_from_secrets()
        from storage.gsheets import GSheetsConfig, SleepGSheets

        return SleepRepo(SleepGSheets(gc, GSheetsConfig(spreadsheet_name=cfg.spreadsheet_name)), tz=tz)
    return SleepRepo(InMemoryRecordStore(), tz=tz)


def get_repo(cfg: AppConfig) -> SleepRepo:
    """
    Cached repo instance (one per process, so the in-memory store survives reruns).
    """
    @st.cache_resource
    def _build_repo(backend: str, spreadsheet_name: str, timezone: str) -> SleepRepo:
        return build_repo(AppConfig(backend=backend, spreadsheet_name=spreadsheet_name, timezone=timezone))

    return _build_repo(cfg.backend, cfg.spreadsheet_name, cfg.timezone)
