#!/usr/bin/env python
"""
Create the issue tables (if missing) and add an administrator account.

Usage: python scripts/create_admin.py <username> <password>
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from meresahar.core.config import settings
from meresahar.core.security import create_admin
from meresahar.db.base import Base
from meresahar.db.session import build_engine, make_session_factory
import meresahar.models  # noqa: F401


def main(argv):
    if len(argv) != 3:
        print(__doc__.strip())
        return 2
    username, password = argv[1], argv[2]

    engine = build_engine(settings.database_url)
    Base.metadata.create_all(engine)
    db = make_session_factory(engine)()
    try:
        admin = create_admin(db, username, password)
        print(f"✅ Admin '{admin.username}' created (id={admin.id})")
    finally:
        db.close()
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
