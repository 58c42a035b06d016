"""
HTTP layer of the coverage engine.

Run with:
    uvicorn api.main:app
"""
