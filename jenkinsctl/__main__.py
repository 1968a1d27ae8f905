"""
Punto de entrada: python -m jenkinsctl
"""

from jenkinsctl.cli import main

if __name__ == "__main__":
    main()
