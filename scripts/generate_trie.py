from __future__ import annotations

import sys

from ctclm.decoding.trie_builder import main

if __name__ == "__main__":
    sys.exit(main())
