"""Health signal processing core.

This package contains the deterministic business logic behind the health
assistant: constitution scoring, emergency screening, anonymization and
regional symptom aggregation. It is isolated from web, storage and cloud
concerns so it can be tested and reasoned about on its own.
"""
