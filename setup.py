from setuptools import setup, find_packages
import re

# Read version from plancost/__init__.py
with open('plancost/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='plancost',
    version=version,
    packages=find_packages(include=['plancost', 'plancost.*']),
    package_data={
        'plancost': ['data/*.yaml', 'data/plan_years/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'plan-cost=plancost.cli.__main__:main',
            'plan-cost-mcp=plancost.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Health plan cost comparison calculator.',
    python_requires='>=3.10',
)
