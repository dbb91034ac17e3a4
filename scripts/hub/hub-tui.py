#!/usr/bin/env python3
"""Thin entrypoint for the hub terminal client."""

from __future__ import annotations

from hub_tui.app import main


if __name__ == "__main__":
    raise SystemExit(main())
