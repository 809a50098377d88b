"""
Joinix - request resilience and geo search for the Joinix sports-meetup client.

- joinix.core: error taxonomy, logging, settings
- joinix.execution: deadlines, retries, fallbacks, request gateway
- joinix.geo: bounding boxes, Haversine distance, radius filtering
- joinix.events: event model, explore-screen search, event service
"""

__version__ = "0.1.0"
