from setuptools import setup, find_packages

setup(
	name='machoinspector',
	version='1.0.0',
	description='Inspect the header, load commands, segments and symbols of Mach-O files',
	python_requires='>=3.8',
	author='arandomdev',
	install_requires=['progressbar2'],
	extras_require={'test': ['pytest']},
	packages=find_packages(
		where='src'
	),
	package_dir={"": "src"},
	classifiers=[
		'Programming Language :: Python :: 3',
		'License :: OSI Approved :: MIT License',
		'Operating System :: OS Independent'
	],
	scripts=['bin/machoinspect']
)
