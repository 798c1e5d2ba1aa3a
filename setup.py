from setuptools import setup, find_packages

def get_requirements():
    with open("requirements.txt") as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.startswith(("#", "-"))
        ]

setup(
    name="svg-power-opt",
    version="0.1.0",
    description="Batch SVG/SVGZ optimizer with an svgo-style plugin pipeline",
    packages=find_packages(where="svg-power-opt"),
    package_dir={"": "svg-power-opt"},
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'svg-power-opt = svgopt.cli:main',
        ],
    },
    install_requires=get_requirements(),
    extras_require={
        'test': ['pytest'],
    },
)
