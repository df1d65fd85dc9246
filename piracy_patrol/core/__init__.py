"""Core simulation primitives (seat evolution, random/clock capabilities).

Kept free of FastAPI and Redis concerns so it can be driven by the API, the
asyncio runner, and tests alike.
"""
