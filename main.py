from __future__ import annotations

from chatbridge.runtime.lifecycle import main

if __name__ == "__main__":
    raise SystemExit(main())
