"""The `revopt` module provides reverse-communication optimization methods.

The main entry points are the drivers in
[`revopt.optimization`][revopt.optimization], which minimize a function given
an initial point. The building blocks are available separately:

- [`revopt.vectors`][revopt.vectors]: Variable spaces and vector operations.
- [`revopt.linesearch`][revopt.linesearch]: Line searches.
- [`revopt.optimizers`][revopt.optimizers]: Reverse-communication optimizers.
- [`revopt.config`][revopt.config]: Validation of the parameters.
"""
