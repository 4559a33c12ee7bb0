"""
Herbapedia content pipeline: scrape, match, store and verify.

Structure:
    herbapedia/
    ├── extractors/     - Listing crawler, page parser, section classifier
    ├── utils/          - Configuration, logging, exceptions
    ├── site.py         - Languages, categories, URL builders
    ├── models.py       - LocalizedRecord and canonical fields
    ├── fetch.py        - Rate-limited HTTP
    ├── matching.py     - zh-HK / zh-CN -> English entity resolution
    ├── store.py        - YAML content store, index, staged rebuild
    ├── verifier.py     - Cross-language schema verification
    ├── reports.py      - Console / Markdown / JSON reports
    ├── scrape.py       - Scraper CLI
    ├── verify.py       - Verifier CLI
    └── fix.py          - Schema repair CLI

Quick Usage:
    from herbapedia.store import ContentStore
    from herbapedia.verifier import verify_store

    result = verify_store(ContentStore("src/content/herbs"))

CLI:
    python -m herbapedia.scrape --all-languages
    python -m herbapedia.verify --report
    python -m herbapedia.fix --dry-run
"""

__version__ = "1.0.0"
