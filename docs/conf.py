#!/usr/bin/env python3
import sys
import os
import os.path as path
import datetime


### -- General options -- ###

# Document the checkout rather than an installed copy.
if path.exists(path.join('..', 'ircmill')):
    sys.path.insert(0, os.path.abspath('..'))
import ircmill

project = ircmill.__name__
copyright = '2024-{current}, the ircmill authors'.format(current=datetime.date.today().year)
version = release = ircmill.__version__

extensions = [
    # API reference from docstrings.
    'sphinx.ext.autodoc',
    # Links into the Python documentation for asyncio, logging and friends.
    'sphinx.ext.intersphinx',
    'sphinx.ext.viewcode'
]
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None)
}
autodoc_member_order = 'bysource'

master_doc = 'index'
exclude_patterns = ['_build']
pygments_style = 'trac'


### -- HTML output -- ##

if os.environ.get('READTHEDOCS', None) != 'True':
    html_theme = 'sphinx_rtd_theme'
html_show_sphinx = False
htmlhelp_basename = 'ircmilldoc'


### -- API filtering -- ##

def skip(app, what, name, obj, skip, options):
    """ Keep wire-level plumbing and per-numeric handlers out of the API reference. """
    if skip:
        return True
    if name.startswith('_') and name != '__init__':
        return True
    if name.startswith(('on_data', 'on_raw_')):
        return True
    return name in ('from_generic', 'to_generic', 'FIELDS', 'CODE')

def setup(app):
    app.connect('autodoc-skip-member', skip)
