""" Command line interface.

Computes electron transport parameters of a gas over a range of electric
fields, prints them, plots them and writes them to a CSV file.  With no
options it reproduces the reference run: pure argon at 750 Torr and
293.15 K, 100 linearly spaced fields from 100 V/cm to 100 kV/cm::

   gastable --output-dir results

Options can also be read from a YAML file whose keys are the long option
names (with underscores); options given on the command line take
precedence::

   gastable --config argon.yaml --ne 20

"""

import os
import sys
import logging
import argparse

import yaml

from .medium import GasMedium
from .solver import ConvergenceError
from .transport import from_medium, format_point
from .output import write_csv, plot_parameters

DEFAULTS = dict(gas=[['Ar', 100.]],
                pressure=750.,
                temperature=293.15,
                emin=100.,
                emax=100000.,
                ne=100,
                log=False,
                maxn=200,
                rtol=1e-5,
                strict=False,
                cross_sections=None,
                output_dir='.',
                csv='transport_parameters.csv',
                save_table=None,
                load_table=None,
                no_plots=False,
                show=False,
                debug=False,
                config=None)


def make_parser():
    argparser = argparse.ArgumentParser(
        prog='gastable',
        description="Electron transport parameters of a gas as a function "
        "of the electric field")

    argparser.add_argument("--config",
                           help="YAML file with default values of the options")
    argparser.add_argument("--gas", nargs=2, action='append',
                           metavar=('NAME', 'PERCENT'),
                           help="Component of the gas mixture "
                           "(repeat for mixtures; default: Ar 100)")
    argparser.add_argument("--pressure", "-p", type=float,
                           help="Gas pressure (in Torr)")
    argparser.add_argument("--temperature", "-T", type=float,
                           help="Gas temperature (in K)")
    argparser.add_argument("--emin", type=float,
                           help="Lowest electric field (in V/cm)")
    argparser.add_argument("--emax", type=float,
                           help="Highest electric field (in V/cm)")
    argparser.add_argument("--ne", type=int,
                           help="Number of field points")
    argparser.add_argument("--log", action='store_true', default=None,
                           help="Space the fields logarithmically")
    argparser.add_argument("--cross-sections", dest='cross_sections',
                           help="File with cross-sections in BOLSIG+ format "
                           "(default: built-in sets)")
    argparser.add_argument("--maxn", type=int,
                           help="Maximum solver iterations per field point")
    argparser.add_argument("--rtol", type=float,
                           help="Convergence tolerance of the EEDF")
    argparser.add_argument("--strict", action='store_true', default=None,
                           help="Stop at the first field point that does "
                           "not converge")
    argparser.add_argument("--output-dir", dest='output_dir',
                           help="Directory for the plots and the CSV file")
    argparser.add_argument("--csv",
                           help="Name of the CSV file")
    argparser.add_argument("--save-table", dest='save_table',
                           help="Save the gas table to this .npz file")
    argparser.add_argument("--load-table", dest='load_table',
                           help="Use a gas table saved with --save-table "
                           "instead of computing it")
    argparser.add_argument("--no-plots", dest='no_plots',
                           action='store_true', default=None,
                           help="Do not draw the plots")
    argparser.add_argument("--show", action='store_true', default=None,
                           help="Display the plots after saving them")
    argparser.add_argument("--debug",
                           help="If set, produce a lot of output for debugging",
                           action='store_true', default=None)

    return argparser


def load_config(path):
    """ Reads option defaults from a YAML mapping. """
    with open(path) as fp:
        config = yaml.safe_load(fp) or {}

    if not isinstance(config, dict):
        raise ValueError("%s must contain a mapping of options" % path)

    return {key.replace('-', '_'): value for key, value in config.items()}


def _config_value(action, value):
    """ Converts a value read from the config file the way argparse
    converts the same option given on the command line. """
    if action.nargs == 0:
        if not isinstance(value, bool):
            raise TypeError("expected true or false, got %r" % (value,))
        return value

    if action.dest == 'gas':
        if not isinstance(value, list):
            raise TypeError("expected a list of [name, percent] pairs")
        pairs = []
        for item in value:
            if not isinstance(item, list) or len(item) != 2:
                raise TypeError("expected [name, percent], got %r" % (item,))
            pairs.append([str(item[0]), float(item[1])])
        return pairs

    if value is None or isinstance(value, (list, dict)):
        raise TypeError("expected a single value, got %r" % (value,))

    if action.type is None:
        if not isinstance(value, str):
            raise TypeError("expected a string, got %r" % (value,))
        return value

    return action.type(str(value))


def parse_args(argv=None):
    """ Parses the command line.  Values are taken, in this order, from the
    command line, the --config file and :data:`DEFAULTS`. """
    argparser = make_parser()
    args = argparser.parse_args(argv)

    settings = dict(DEFAULTS)
    if args.config:
        try:
            config = load_config(args.config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            argparser.error("cannot read config file: %s" % e)

        unknown = set(config) - set(vars(args))
        if unknown:
            argparser.error("unknown options in %s: %s"
                            % (args.config, ", ".join(sorted(unknown))))

        actions = {a.dest: a for a in argparser._actions}
        for key, value in config.items():
            try:
                settings[key] = _config_value(actions[key], value)
            except (TypeError, ValueError) as e:
                argparser.error("invalid value for '%s' in %s: %s"
                                % (key, args.config, e))

    for key, value in vars(args).items():
        if value is not None:
            settings[key] = value

    return argparser, argparse.Namespace(**settings)


def build_medium(args):
    gas = GasMedium()

    if args.load_table:
        gas.load_gas_table(args.load_table)
        return gas

    if args.cross_sections:
        with open(args.cross_sections) as fp:
            gas.load_cross_sections(fp)

    composition = []
    for name, percent in args.gas:
        composition.extend([name, float(percent)])

    gas.set_composition(*composition)
    gas.pressure = args.pressure
    gas.temperature = args.temperature
    gas.set_field_grid(args.emin, args.emax, args.ne, log_scale=args.log)

    return gas


def main(argv=None):
    argparser, args = parse_args(argv)

    if args.debug:
        logging.basicConfig(format='[%(asctime)s] %(module)s.%(funcName)s: '
                            '%(message)s',
                            datefmt='%a, %d %b %Y %H:%M:%S',
                            level=logging.DEBUG)

    try:
        gas = build_medium(args)
    except (OSError, TypeError, ValueError) as e:
        argparser.error(str(e))

    if not args.load_table:
        try:
            gas.generate_gas_table(maxn=args.maxn, rtol=args.rtol,
                                   strict=args.strict)
        except ConvergenceError as e:
            logging.error("Gas table generation aborted: %s", e)
            return 1

    if args.save_table:
        gas.table.save(args.save_table)

    params = from_medium(gas)
    for i in range(len(params)):
        print(format_point(params, i))

    os.makedirs(args.output_dir, exist_ok=True)

    if not args.no_plots:
        plot_parameters(params, args.output_dir, show=args.show)

    write_csv(params, os.path.join(args.output_dir, args.csv))

    return 0


if __name__ == '__main__':
    sys.exit(main())
