#!/usr/bin/env python3
"""
AlbumDrop production startup script
"""

import os
import uvicorn

def start_production_server():
    """Start the production server"""
    port = int(os.getenv("PORT", "3000"))
    print(f"Starting AlbumDrop on port {port}")
    print(f"Admin panel: http://localhost:{port}/admin")
    print(f"API Documentation: http://localhost:{port}/docs")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        workers=2,
        log_level="info",
        access_log=True
    )

if __name__ == "__main__":
    start_production_server()
