r"""This module contains the core components, aside :class:`optmodel.OptModel` and its
base classes, that are used to build the package.

Overview
========

It contains the following submodules:

- :mod:`optmodel.core.cache`: a decorator :func:`invalidate_cache` that clears the
  cached properties of a model (e.g., its assembled matrices) whenever a method that
  declares new blocks is invoked.
- :mod:`optmodel.core.data`: a collection of functions for converting bounds, initial
  values and coefficient matrices to numpy arrays and scipy sparse matrices, and the
  latter to CasADi.
- :mod:`optmodel.core.debug`: contains classes for storing debug information on the
  variables and constraints declared in an instance of :class:`optmodel.OptModel`.

Submodules
==========

.. autosummary::
   :toctree: generated

   cache
   data
   debug
"""
