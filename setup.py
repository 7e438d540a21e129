from setuptools import setup, find_packages
import re

# Read version from scfvplan/__init__.py
with open('scfvplan/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='scfv-plan',
    version=version,
    packages=find_packages(include=['scfvplan', 'scfvplan.*']),
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
        'XlsxWriter>=3.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
            'openpyxl>=3.1',
        ],
    },
    entry_points={
        'console_scripts': [
            'scfv-plan=scfvplan.cli.__main__:main',
            'scfv-plan-mcp=scfvplan.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Budget planning and payroll cost projection for SCFV social assistance projects.',
    python_requires='>=3.10',
)
