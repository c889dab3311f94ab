import setuptools

setuptools.setup(
    name = 'bezcurve',
    version = '1.0',
    description = 'piecewise cubic Bezier curve engine',
    packages = setuptools.find_packages(),
    install_requires=['numpy', 'scipy'],
    extras_require={'test': ['pytest']},
)
