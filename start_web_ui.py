#!/usr/bin/env python3
"""
================================================================================
WEB UI LAUNCHER - Start Course Enrollment Site
================================================================================

Convenience launcher for the web server.

Usage:
    python start_web_ui.py

Access at: http://localhost:5000
================================================================================
"""

import sys


def main():
    """Start the web server"""
    from quwius.web import server

    print("Starting Quwius course enrollment site...")
    try:
        server.main()
    except KeyboardInterrupt:
        print("\n\nShutting down web server...")
    except OSError as e:
        print(f"\nError starting web server: {e}")
        print("\nTry another port: python cli.py web --port 8080")
        sys.exit(1)


if __name__ == '__main__':
    main()
