"""
Command-line interface for the neoaura engine.

Usage:
    # List the catalogued near-Earth objects
    python -m neoaura list

    # Collision-risk assessment for one body over the next five years
    python -m neoaura assess 3704144

    # Attempt a deflection, reproducibly
    python -m neoaura deflect 3704144 --method kinetic --days 365 --seed 1

    # Surface effects of an impact
    python -m neoaura impact --diameter 50 --velocity 17 --ocean
"""

import argparse
import logging
import sys

import numpy as np

from neoaura.bodies import bodies_data
from neoaura.config import DEFAULT_HORIZON_DAYS, DebugOverrides
from neoaura.deflection import DeflectionMethodId, compute_deflection, state_from_orbit
from neoaura.exceptions import NeoAuraError
from neoaura.impact import ImpactInput, calculate_impact_physics
from neoaura.risk import analyze_orbital_intersections


def _get_body(body_id):
    try:
        return bodies_data[body_id]
    except KeyError:
        raise NeoAuraError(f"No catalogued body with id {body_id}") from None


def _list(args):
    for body in bodies_data.values():
        flag = "PHA" if body.hazardous else "   "
        print(f"{body.id:>8}  {flag}  {body.name:<14}  a={body.elements.a:.4f} AU  "
              f"e={body.elements.e:.4f}  i={body.elements.i:.3f} deg  "
              f"D={body.diameter:.0f} m")


def _assess(args):
    body = _get_body(args.body_id)
    assessment = analyze_orbital_intersections(body.elements, horizon_days=args.horizon)
    print(f"{body}: risk {assessment.risk_level.value} "
          f"(collision probability {assessment.collision_probability:.2f})")
    if assessment.closest_approach is not None:
        ca = assessment.closest_approach
        print(f"Closest approach {ca.distance:.6f} AU at t = {ca.time:.1f} days")
    for line in assessment.recommendations:
        print(f"  - {line}")


def _deflect(args):
    body = _get_body(args.body_id)
    state = state_from_orbit(body.elements, miss_distance=body.miss_distance)
    overrides = DebugOverrides(force_success=args.force_success, force_failure=args.force_failure)
    result = compute_deflection(state, args.method, args.days,
                                rng=np.random.default_rng(args.seed), overrides=overrides)
    print(f"{result.method} on {body}: {'SUCCESS' if result.success else 'FAILURE'} "
          f"(p = {result.success_probability:.3f})")
    print(f"Miss distance {result.original_orbit.miss_distance:.6f} AU -> "
          f"{result.new_orbit.miss_distance:.6f} AU")
    print(f"Impact probability reduction {result.impact_probability_reduction:.1f} %")
    print(f"Energy required {result.energy_required:.3e} J, |dv| = {np.linalg.norm(result.delta_v):.3e} km/s")


def _impact(args):
    effects = calculate_impact_physics(
        ImpactInput(diameter=args.diameter, velocity=args.velocity, density=args.density, angle=args.angle),
        is_ocean=args.ocean,
    )
    print(f"Energy {effects.kinetic_energy:.3e} J ({effects.tnt_equivalent:.3f} Mt TNT), "
          f"risk {effects.risk_level.value}")
    print(effects.description)
    print(f"Crater {effects.crater_diameter:.0f} m wide, {effects.crater_depth:.0f} m deep")
    print(f"Seismic magnitude {effects.seismic_magnitude:.1f}")
    print(f"Airblast {effects.airblast_radius:.2f} km, thermal {effects.thermal_radius:.2f} km, "
          f"ejecta {effects.ejecta_radius:.2f} km")
    if args.ocean:
        print(f"Tsunami wave height {effects.tsunami_wave_height:.1f} m")


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="neoaura",
        description="Near-Earth object orbits, close approaches, deflection and impact effects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.required = True

    list_parser = subparsers.add_parser('list', help='List catalogued bodies')
    list_parser.set_defaults(func=_list)

    assess_parser = subparsers.add_parser('assess', help='Collision-risk assessment for a body')
    assess_parser.add_argument("body_id", type=int)
    assess_parser.add_argument("--horizon", type=float, default=DEFAULT_HORIZON_DAYS,
                               help="Search horizon in days (default: %(default)s)")
    assess_parser.set_defaults(func=_assess)

    deflect_parser = subparsers.add_parser('deflect', help='Attempt a deflection of a body')
    deflect_parser.add_argument("body_id", type=int)
    deflect_parser.add_argument("--method", choices=[m.value for m in DeflectionMethodId],
                                default=DeflectionMethodId.KINETIC.value)
    deflect_parser.add_argument("--days", type=float, default=365.0,
                                help="Days before impact (default: %(default)s)")
    deflect_parser.add_argument("--seed", type=int, default=None, help="Seed for the success draw")
    outcome = deflect_parser.add_mutually_exclusive_group()
    outcome.add_argument("--force-success", action="store_true")
    outcome.add_argument("--force-failure", action="store_true")
    deflect_parser.set_defaults(func=_deflect)

    impact_parser = subparsers.add_parser('impact', help='Surface effects of an impact')
    impact_parser.add_argument("--diameter", type=float, required=True, help="Impactor diameter (m)")
    impact_parser.add_argument("--velocity", type=float, required=True, help="Impact velocity (km/s)")
    impact_parser.add_argument("--density", type=float, default=3000.0, help="kg/m^3 (default: %(default)s)")
    impact_parser.add_argument("--angle", type=float, default=45.0, help="deg from horizontal (default: %(default)s)")
    impact_parser.add_argument("--ocean", action="store_true", help="Impact into deep ocean")
    impact_parser.set_defaults(func=_impact)

    return parser


def main(argv=None):
    """Main entry point for the neoaura CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except NeoAuraError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
