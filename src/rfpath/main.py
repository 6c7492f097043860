"""
rfpath command line

Analyze a point-to-point path against live terrain data, or convert
between coordinates and Maidenhead grid locators.

Examples:
    rfpath analyze 47.6062,-122.3321 CN87uo --height-a 15 --height-b 10 --frequency 145.5
    rfpath locator encode 51.5 -0.12 --precision 8
    rfpath locator decode IO91wm
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .common.config import get_config
from .common.exceptions import InvalidInputError, DegenerateGeometryError, ProviderFailure
from .common.geodesy import GeoPoint, compass_direction, validate_point
from .common.logging_config import configure_logging, ServiceLogger
from .locator import maidenhead
from .propagation.atmosphere import validate_k_factor, k_factor_description
from .propagation.link_budget import Modulation, ModulationProfile, StationConfig
from .propagation.path_analysis import PathAnalyzer, RfAnalyzedPathResult, Station, evaluate_link
from .terrain.elevation import OpenElevationClient

EXIT_OK = 0
EXIT_PROVIDER_FAILURE = 1
EXIT_INVALID_INPUT = 2


def parse_point(text: str) -> GeoPoint:
    """
    Parse "lat,lon" or a Maidenhead locator into a point

    Raises:
        InvalidInputError: Neither form parses
    """
    if ',' in text:
        parts = text.split(',')
        if len(parts) != 2:
            raise InvalidInputError(f"Expected 'lat,lon', got {text!r}")
        try:
            point = GeoPoint(float(parts[0]), float(parts[1]))
        except ValueError as e:
            raise InvalidInputError(f"Invalid coordinates {text!r}: {e}") from e
        return validate_point(point)

    return maidenhead.decode(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rfpath',
        description='RF point-to-point path analysis'
    )
    parser.add_argument('--config', type=str, default=None, help='Path to configuration YAML')
    parser.add_argument('--log-level', type=str, default=None, help='Override log level')

    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help='Analyze a path between two points')
    analyze.add_argument('point_a', help="Start point: 'lat,lon' or grid locator")
    analyze.add_argument('point_b', help="End point: 'lat,lon' or grid locator")
    analyze.add_argument('--name-a', default='A', help='Start station name')
    analyze.add_argument('--name-b', default='B', help='End station name')
    analyze.add_argument('--height-a', type=float, default=10.0, help='Start antenna height (m)')
    analyze.add_argument('--height-b', type=float, default=10.0, help='End antenna height (m)')
    analyze.add_argument('--frequency', type=float, default=None, help='Frequency (MHz)')
    analyze.add_argument('--k-factor', type=float, default=None, help='Refraction K-factor')
    analyze.add_argument('--samples', type=int, default=None, help='Path sample intervals')
    analyze.add_argument('--tx-power', type=float, default=None,
                         help='Transmitter power (W) at both ends; enables link budget')
    analyze.add_argument('--antenna-gain', type=float, default=0.0, help='Antenna gain (dBi)')
    analyze.add_argument('--cable-loss', type=float, default=0.0, help='Cable loss (dB)')
    analyze.add_argument('--modulation', type=str, default=Modulation.FM_25KHZ.value,
                         help='Modulation preset name')
    analyze.add_argument('--json', action='store_true', help='Print the full result as JSON')

    locator = subparsers.add_parser('locator', help='Maidenhead grid locator conversion')
    locator_sub = locator.add_subparsers(dest='locator_command', required=True)

    encode = locator_sub.add_parser('encode', help='Coordinates to locator')
    encode.add_argument('latitude', type=float)
    encode.add_argument('longitude', type=float)
    encode.add_argument('--precision', type=int, default=6, choices=maidenhead.VALID_PRECISIONS)

    decode = locator_sub.add_parser('decode', help='Locator to cell center')
    decode.add_argument('locator')

    return parser


def _print_summary(result, link=None) -> None:
    path = result.path if isinstance(result, RfAnalyzedPathResult) else result
    los = path.los

    print(f"{path.name1} -> {path.name2}")
    print(f"  Distance:        {path.distance:.3f} km")
    print(f"  Bearing:         {path.bearing:.1f}° ({compass_direction(path.bearing)})")
    print(f"  Reverse bearing: {path.reverse_bearing:.1f}° ({compass_direction(path.reverse_bearing)})")
    print(f"  K-factor:        {los.k_factor:.3f} ({k_factor_description(los.k_factor)})")
    if los.is_blocked:
        print(f"  Line of sight:   BLOCKED at {los.block_distance:.3f} km "
              f"(max obstruction {los.max_obstacle:.1f} m)")
    else:
        print("  Line of sight:   clear")

    if isinstance(result, RfAnalyzedPathResult):
        zone = result.fresnel_zone
        print(f"  Frequency:       {result.frequency_mhz:.3f} MHz")
        print(f"  FSPL:            {result.fspl_db:.2f} dB")
        print(f"  Fresnel radius:  {zone.radius:.1f} m")
        print(f"  Min clearance:   {zone.min_clearance:.0f}% at {zone.min_clearance_distance:.3f} km "
              f"({zone.status})")
        print(f"  Diffraction:     {len(result.diffraction.obstacles)} obstacles, "
              f"{result.diffraction.total_loss:.1f} dB")

    if link is not None:
        budget, (a_to_b, b_to_a) = link
        print(f"  A->B received:   {budget.a_to_b.received_power_dbm:.1f} dBm, "
              f"fade margin {a_to_b.fade_margin:.1f} dB ({a_to_b.quality.value})")
        print(f"  B->A received:   {budget.b_to_a.received_power_dbm:.1f} dBm, "
              f"fade margin {b_to_a.fade_margin:.1f} dB ({b_to_a.quality.value})")


async def run_analyze(args, config) -> int:
    """Run the analyze subcommand"""
    logger = ServiceLogger("rfpath", "cli")

    if args.k_factor is not None:
        config.analysis.k_factor = validate_k_factor(args.k_factor)
    if args.samples is not None:
        config.analysis.path_samples = args.samples
    config.validate()

    station_a = Station(args.name_a, parse_point(args.point_a), args.height_a)
    station_b = Station(args.name_b, parse_point(args.point_b), args.height_b)

    analyzer = PathAnalyzer(OpenElevationClient(config=config.elevation), config)
    result = await analyzer.analyze(station_a, station_b, args.frequency)

    link = None
    if args.tx_power is not None and isinstance(result, RfAnalyzedPathResult):
        modulation = Modulation.from_name(args.modulation)
        profile = modulation.profile
        station = StationConfig.from_watts(
            args.tx_power,
            antenna_gain=args.antenna_gain,
            cable_loss_db=args.cable_loss,
            rx_sensitivity_dbm=profile.sensitivity_dbm,
        )
        link = evaluate_link(result, station, station, profile)

    if args.json:
        output = result.to_dict()
        if link is not None:
            budget, (a_to_b, b_to_a) = link
            output['link_budget'] = budget.to_dict()
            output['link_assessment'] = {'a_to_b': a_to_b.to_dict(), 'b_to_a': b_to_a.to_dict()}
        print(json.dumps(output, indent=2))
    else:
        _print_summary(result, link)

    logger.debug("Analysis complete")
    return EXIT_OK


def run_locator(args) -> int:
    """Run the locator subcommand"""
    if args.locator_command == 'encode':
        print(maidenhead.encode(GeoPoint(args.latitude, args.longitude), args.precision))
    else:
        point = maidenhead.decode(args.locator)
        print(f"{maidenhead.canonicalize(args.locator)}: {point.latitude:.6f}, {point.longitude:.6f}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = get_config(args.config)
        configure_logging(config.logging, level_override=args.log_level)

        if args.command == 'locator':
            return run_locator(args)
        return asyncio.run(run_analyze(args, config))

    except (InvalidInputError, DegenerateGeometryError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except ProviderFailure as e:
        print(f"elevation lookup failed: {e}", file=sys.stderr)
        return EXIT_PROVIDER_FAILURE


if __name__ == "__main__":
    sys.exit(main())
