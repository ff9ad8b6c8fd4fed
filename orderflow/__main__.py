"""Allow running as: python -m orderflow"""

from orderflow.cli import main

main()
