#!/usr/bin/env python
"""
Run the Streamlit workflow quote page.

Usage:
    python scripts/run_app.py
"""
import subprocess
import sys
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'workflow_quote' / 'ui' / 'app_streamlit.py'

    if not ui_path.exists():
        print(f"ERROR: UI module not found at {ui_path}")
        sys.exit(1)

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path)]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nApplication stopped.")


if __name__ == "__main__":
    main()
