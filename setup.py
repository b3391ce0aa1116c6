from setuptools import setup, find_packages

setup(
    name="lithophane",
    version="0.1.0",
    description="Convert images into watertight lithophane meshes for 3D printing",
    author="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["lithophane"],
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "trimesh",
        "matplotlib",
        "tqdm",
        "networkx",
        "Pillow>=9.1",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "lithophane=lithophane:main",
        ],
    },
)
