"""
Setup script for LAN Device Monitor.

Usage:
    pip install -e .            # install with the lan-monitor command
    pip install -e .[test]      # plus the test tooling

Run the tests with:
    pytest tests/
"""
from setuptools import setup

setup(
    name='lan-device-monitor',
    version='1.0.0',
    description='Discovers devices on the local /24 network and reports changes',
    python_requires='>=3.9',
    packages=[
        'config',
        'discovery',
    ],
    py_modules=['lan_monitor'],
    install_requires=[
        'psutil>=5.9',
        'ping3>=4.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'hypothesis>=6.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'lan-monitor=lan_monitor:main',
        ],
    },
)
