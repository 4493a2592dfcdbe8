"""
Setup script for Net Bar.

Usage:
    pip install -e .[test]      # development install
    python setup.py py2app      # build the macOS application

The py2app build lands in the 'dist' folder.
"""
import sys

from setuptools import setup

APP = ['netbar.py']
DATA_FILES = []

OPTIONS = {
    'argv_emulation': False,
    'plist': {
        'CFBundleName': 'Net Bar',
        'CFBundleDisplayName': 'Net Bar',
        'CFBundleIdentifier': 'com.netbar.app',
        'CFBundleVersion': '1.0.0',
        'CFBundleShortVersionString': '1.0.0',
        'LSMinimumSystemVersion': '12.0.0',
        'LSUIElement': True,  # Hide dock icon (menu bar app)
        'NSHighResolutionCapable': True,
        'NSLocationWhenInUseUsageDescription': 'Net Bar needs location access to read Wi-Fi network name and signal details.',
        'NSLocationUsageDescription': 'Net Bar needs location access to read Wi-Fi network name and signal details.',
    },
    'packages': [
        # Our packages
        'monitor',
        'storage',
        'config',
        'app',
    ],
    'includes': [
        'rumps',
        'psutil',
        'objc',
        'Foundation',
        'CoreWLAN',
        'CoreLocation',
        'SystemConfiguration',
    ],
    'excludes': [
        'tkinter',
        'pytest',
        'coverage',
        'pip',
    ],
    'site_packages': True,
}

INSTALL_REQUIRES = [
    'psutil>=5.9',
    'rumps>=0.4.0; sys_platform == "darwin"',
    'pyobjc-framework-CoreWLAN>=9.0; sys_platform == "darwin"',
    'pyobjc-framework-CoreLocation>=9.0; sys_platform == "darwin"',
    'pyobjc-framework-SystemConfiguration>=9.0; sys_platform == "darwin"',
]

py2app_kwargs = {}
if 'py2app' in sys.argv:
    py2app_kwargs = {
        'app': APP,
        'data_files': DATA_FILES,
        'options': {'py2app': OPTIONS},
        'setup_requires': ['py2app'],
    }

setup(
    name='netbar',
    version='1.0.0',
    description='macOS menu-bar network telemetry: throughput, Wi-Fi signal and latency',
    python_requires='>=3.9',
    packages=['config', 'monitor', 'app', 'storage'],
    py_modules=['netbar'],
    install_requires=INSTALL_REQUIRES,
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': ['netbar=netbar:main'],
    },
    **py2app_kwargs,
)
