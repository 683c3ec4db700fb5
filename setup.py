from setuptools import setup, find_packages

with open('requirements.txt') as f:
    required = f.read().splitlines()

setup(
    name = 'hproxy',
    version = '0.1.0',
    description = 'Field dependency and validation engine for the HomeProxy router configuration',
    packages = find_packages(exclude=['test', 'test.*']),
    install_requires = required,
    extras_require = {
        'test': ['pytest', 'pytest-asyncio', 'pytest-cov'],
    },
    python_requires = '>=3.9'
)
