from setuptools import setup, find_packages

setup(
    name='plonepack',
    version='0.1.0',
    py_modules=['plonepack', 'resolver'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'portal': ['static/*'],
    },
    install_requires=[
        'lark',
        'pydantic>=2.0',
        'requests',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'plonepack = plonepack:main',
        ],
    },
)
