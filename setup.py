from setuptools import setup, find_namespace_packages

setup(
    name='cliprail',
    version='0.1.0',
    author='cliprail',
    description='Virtual multi-clip timeline engine with seamless preview playback',
    packages=find_namespace_packages(include=['cliprail', 'cliprail.*']),
    python_requires='>=3.9',
    install_requires=[
        'PySide6>=6.5',
        'numpy>=1.22',
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': [
            'cliprail-preview=cliprail.preview:main',
        ],
    },
)
