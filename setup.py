from setuptools import find_packages, setup

setup(
    name="selected-image-export",
    version="0.1.0",
    description="匯出流程中選取的影像、JSON manifest 與修剪後的 METS",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "Pillow",
        "piexif",
        "paramiko",
        "lxml",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["selected-image-export=selected_image_export.main:main"],
    },
)
