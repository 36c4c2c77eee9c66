"""
# Household Hub

A **FastAPI-based backend** for the Household Hub family application. This package hosts the
**Family Configuration Service**: per-family feature toggles and the AI-integration credential
block, stored in MongoDB and served through a small authenticated REST surface.

## Architecture Overview

```
┌─────────────────────────────────────────────────────────────┐
│                Family Configuration Service                 │
├─────────────────────────────────────────────────────────────┤
│  Route (FastAPI)                                            │
│    └──► Validator (write path only)                         │
│           └──► Service ──► Repository ──► MongoDB (Motor)   │
│                   └──► Mapper (strips apiSecret) ──► Route  │
└─────────────────────────────────────────────────────────────┘
```

## Package Structure

- **`config`**: Pydantic-based configuration with `.hub` / `.env` / environment support
- **`database`**: Motor connection management and the family settings repository
- **`models`**: Feature keys, AI provider enum, settings documents and views
- **`validators`**: Request validation for settings updates
- **`services`**: Business rules (lazy defaults, defensive checks, upsert)
- **`routes`**: HTTP handlers and the auth/role/feature dependencies
- **`cli`**: Maintenance commands (default-settings backfill)

## Getting Started

```bash
pip install -e ".[test]"
uvicorn household_hub.main:app --reload
```

Attributes:
    __version__ (str): Package version. Default: `"1.0.0"`.
    settings (Settings): Re-exported global configuration singleton from `config.py`.
"""

__version__ = "1.0.0"
__author__ = "Household Hub Team"

# Re-export commonly used objects for convenience
from household_hub.config import settings

__description__ = "Family configuration service for the Household Hub API"
