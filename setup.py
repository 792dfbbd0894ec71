PACKAGE_NAME = "isodist"
VERSION = "0.1.0"
LICENSE = 'BSD (3-clause)'
AUTHOR = "Bioanalytical Mass Spectrometry Group at CIBION-CONICET"
AUTHOR_EMAIL = "griquelme.chm@gmail.com"
MAINTAINER = "Gabriel Riquelme"
MAINTAINER_EMAIL = AUTHOR_EMAIL
DESCRIPTION = "Chemical formulas, periodic table and isotopic distributions for mass spectrometry"

with open("README.md") as fin:
    LONG_DESCRIPTION = fin.read()
LONG_DESCRIPTION_CONTENT_TYPE = "text/markdown"

CLASSIFIERS = [
    "License :: OSI Approved :: BSD License",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Topic :: Scientific/Engineering :: Chemistry",
]

PYTHON_REQUIRES = ">=3.9"

INSTALL_REQUIRES = [
    "Cerberus>=1.3",
    "joblib>=1.1",
    "numpy>=1.22",
]

EXTRAS_REQUIRE = {
    "test": [
        "pytest",
        "scipy>=1.8",
    ]
}

if __name__ == "__main__":
    from setuptools import setup, find_packages
    from sys import version_info

    if version_info[:2] < (3, 9):
        msg = "isodist requires Python >= 3.9."
        raise RuntimeError(msg)

    setup(name=PACKAGE_NAME,
          version=VERSION,
          author=AUTHOR,
          author_email=AUTHOR_EMAIL,
          maintainer=MAINTAINER,
          maintainer_email=MAINTAINER_EMAIL,
          license=LICENSE,
          description=DESCRIPTION,
          long_description=LONG_DESCRIPTION,
          long_description_content_type=LONG_DESCRIPTION_CONTENT_TYPE,
          classifiers=CLASSIFIERS,
          packages=find_packages(include=["isodist", "isodist.*"]),
          package_data={"isodist.chem": ["*.json"]},
          python_requires=PYTHON_REQUIRES,
          install_requires=INSTALL_REQUIRES,
          extras_require=EXTRAS_REQUIRE,
          include_package_data=True,
          )
