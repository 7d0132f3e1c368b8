"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='quiver-lang',
	version='0.1.0',
	packages=['quiver', ],
	license='MIT',
	description='Arrow patterns: structural recursion that always terminates, with a clause-matching evaluator',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.12",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Interpreters",
		"Topic :: Software Development :: Compilers",
	],
	python_requires='>=3.11',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
)
