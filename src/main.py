# src/main.py

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional
from datetime import datetime, timedelta

import config
from api_client import NarrativeClient
from data_loader import DataLoader
from exceptions import NetworkError
from facility_graph import build_graph
from models import AnomalyType, OptimizationCriteria
from monitoring import MonitoringService
from optimizer import RouteOptimizer
from simulation import TelemetrySimulator, inject_anomaly

# Anomalies the simulator injects into otherwise normal samples
SIMULATED_ANOMALIES = [
    AnomalyType.CO2_SPIKE,
    AnomalyType.EFFICIENCY_DROP,
    AnomalyType.ENERGY_SURGE,
]


def setup_logging(log_dir: Optional[str] = None):
    """Configure logging"""
    log_dir = log_dir or config.LOG_DIR
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = Path(log_dir) / f"route_monitor_{timestamp}.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(log_filename), logging.StreamHandler(sys.stdout)],
    )
    logging.info(f"Starting new optimization run at {timestamp}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rank facility routes and monitor simulated facility telemetry"
    )
    parser.add_argument("--data-path", default=config.DATA_PATH)
    parser.add_argument("--start", default="wh-1", help="Start facility id")
    parser.add_argument("--end", default="exp-1", help="End facility id")
    parser.add_argument(
        "--criteria",
        default=OptimizationCriteria.BALANCED.value,
        choices=[c.value for c in OptimizationCriteria],
    )
    parser.add_argument("--throughput", type=float, default=config.DEFAULT_THROUGHPUT)
    parser.add_argument("--ticks", type=int, default=12, help="Monitoring ticks to simulate")
    parser.add_argument(
        "--anomaly-rate", type=float, default=0.2, help="Chance of injecting an anomaly"
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--narrative-url", default=config.NARRATIVE_URL)
    return parser.parse_args(argv)


def run_optimization(optimizer: RouteOptimizer, args: argparse.Namespace):
    """Rank routes for the requested criteria and log the results"""
    ranked = optimizer.routes_by_criteria(
        args.start, args.end, args.criteria, args.throughput
    )
    if not ranked:
        logging.warning(f"No route from {args.start} to {args.end}")
        return ranked

    for scored in ranked:
        route = scored.route
        logging.info(
            f"{route.name}: {' -> '.join(route.path)} | "
            f"CO2 {route.total_co2 / 1000:.2f} t/day ({scored.co2_score:.3f}), "
            f"cost {route.operating_cost:,.2f}/day ({scored.cost_score:.3f}), "
            f"energy {route.total_energy / 1000:.2f} MWh/day ({scored.energy_score:.3f}), "
            f"score {scored.total_score:.3f}"
            f"{' [Pareto]' if scored.is_pareto_optimal else ''}"
        )

    optimizer.get_solution_stats(ranked)

    savings = optimizer.calculate_savings(ranked[0].route, [s.route for s in ranked])
    logging.info(
        f"Best vs worst: {savings.co2_saved:.2f} t CO2/day "
        f"({savings.percent_co2_reduction}%), "
        f"{savings.annual_cost_saved:,.0f} per year"
    )

    bounded = optimizer.find_bounded_routes(
        args.start, args.end, throughput=args.throughput
    )
    logging.info(f"Bounded search returned {len(bounded)} routes")
    return ranked


def run_monitoring(
    service: MonitoringService,
    args: argparse.Namespace,
    narrator: Optional[NarrativeClient] = None,
):
    """Feed simulated samples through the monitoring service"""
    simulator = TelemetrySimulator(args.seed)
    start = datetime.now()

    for tick in range(args.ticks):
        timestamp = start + timedelta(minutes=tick)
        samples = []
        for facility in service.facilities.values():
            baseline = service.get_baseline(facility.id)
            if baseline is None:
                continue
            sample = simulator.generate(facility, baseline, timestamp)
            if simulator.should_inject(args.anomaly_rate):
                sample = inject_anomaly(sample, simulator.choose(SIMULATED_ANOMALIES))
            samples.append(sample)

        report = service.process_tick(samples)

        for alert in report.maintenance_alerts:
            logging.info(
                f"{alert.facility_name}: {alert.recommended_action} "
                f"(est. {alert.estimated_downtime}h, {alert.estimated_cost:,.0f}, "
                f"routes: {', '.join(alert.impact_on_routes) or 'none'})"
            )

        if narrator is not None:
            for anomaly in report.anomalies:
                text = narrator.explain_anomaly(
                    anomaly, service.facilities[anomaly.facility_id]
                )
                if text:
                    logging.info(f"Analysis for {anomaly.id}: {text}")


def main(argv: Optional[List[str]] = None):
    """Main application entry point"""
    args = parse_args(argv)
    setup_logging()

    try:
        # Load and validate the network
        try:
            facilities, connections = DataLoader(args.data_path).load_network()
        except FileNotFoundError as e:
            logging.error(f"Data file not found: {e}")
            sys.exit(1)
        except ValueError as e:
            logging.error(f"Invalid network data: {e}")
            sys.exit(1)

        try:
            graph = build_graph(facilities, connections)
        except NetworkError as e:
            logging.error(f"Inconsistent network data: {e}")
            sys.exit(1)

        optimizer = RouteOptimizer(graph)
        ranked = run_optimization(optimizer, args)

        service = MonitoringService(graph.facilities)
        service.initialize_baselines()
        service.register_routes([s.route for s in ranked])

        narrator = None
        if args.narrative_url:
            narrator = NarrativeClient(args.narrative_url, config.NARRATIVE_API_KEY)
        run_monitoring(service, args, narrator)

        for facility_id in service.history.facility_ids:
            summary = service.history.summary(facility_id)
            if summary:
                logging.info(
                    f"{facility_id}: mean CO2 {summary['co2_emissions']:.2f} kg/bbl, "
                    f"mean efficiency {summary['efficiency']:.3f}"
                )

    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
