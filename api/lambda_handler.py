"""
Lambda entrypoint for the Voice of Customer API.
The in-memory cache and rate limiters live per warm container.
"""
from mangum import Mangum
from api.main import app

handler = Mangum(app, lifespan="on")
