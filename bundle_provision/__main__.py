from __future__ import annotations

from bundle_provision.runtime.lifecycle import main

raise SystemExit(main())
