# tests/conftest.py
import sys
import logging
from pathlib import Path

# Make the src layout and the shared test builders importable without an install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))
sys.path.insert(0, str(Path(__file__).parent))

# Configure minimal logging for tests
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Disable SQLAlchemy INFO messages during tests
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
