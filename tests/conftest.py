"""
Configuration for pytest.
"""

import sys
from pathlib import Path

# Make svg2frames importable without installing the package
package_root = Path(__file__).parent.parent
sys.path.insert(0, str(package_root))
