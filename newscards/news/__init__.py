"""
News Module
===========

The news card pipeline:
- Source registry for RSS feeds and Twitter handles
- Feed and social fetchers with fetch-time dedup
- Manual ingestion into the queue
- Rewrite engine (scraped context + LLM) and the publish worker
- Periodic jobs on APScheduler
"""
