"""
Vercel entry point for the SPS planning API.

Builds the application once per serverless instance; storage and session
backends are selected from the environment (DATA_SOURCE, MONGODB_URI,
REST_API_URL, REDIS_URL).
"""

import os
from app import create_app

# Vercel expects the WSGI application to be named 'app'
app = create_app()

if __name__ == "__main__":
    app.run(debug=False, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
