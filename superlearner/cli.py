"""
superlearner: cross-validated ensemble learning

CLI interface for fitting a Super Learner and making predictions.

Usage:
    superlearner fit <data.csv> --outcome Y [OPTIONS]
    superlearner predict <fit.pkl> <data.csv> [OPTIONS]
    superlearner info <fit.pkl>
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from superlearner import (
    EncodingLearner,
    FoldKind,
    FoldScheme,
    Learner,
    Pipeline,
    ProgressUpdate,
    SuperLearner,
    SuperLearnerConfig,
    SuperLearnerError,
    Task,
    create_learner,
    load_artifact,
    save_fit,
)


def cmd_fit(args: argparse.Namespace) -> int:
    """Fit a Super Learner on a dataset."""
    dataset_path = Path(args.input)

    if not dataset_path.exists():
        print(f"Error: Dataset file not found: {dataset_path}")
        return 1

    # Load data
    print(f"Loading data from {dataset_path}...")
    data = pd.read_csv(dataset_path)
    print(f"Loaded {len(data)} rows, {len(data.columns)} columns")

    if args.covariates:
        covariates = [c.strip() for c in args.covariates.split(",") if c.strip()]
    else:
        excluded = {args.outcome, args.id}
        covariates = [str(c) for c in data.columns if c not in excluded]

    if args.fold_kind:
        kind = FoldKind(args.fold_kind)
    else:
        kind = FoldKind.CLUSTER if args.id else FoldKind.VFOLD
    scheme = FoldScheme(
        kind=kind,
        n_folds=args.folds,
        random_seed=args.seed,
    )

    def on_progress(update: ProgressUpdate) -> None:
        pct = f"{update.progress * 100:5.1f}%"
        if args.verbose:
            print(f"[{pct}] {update.stage.value}: {update.message}")
        else:
            # Simple progress bar
            bar_len = 30
            filled = int(bar_len * update.progress)
            bar = "=" * filled + "-" * (bar_len - filled)
            print(f"\r[{bar}] {pct} {update.message[:40]:<40}", end="", flush=True)

    try:
        task = Task.create(
            data,
            covariates=covariates,
            outcome=args.outcome,
            outcome_type=args.outcome_type,
            folds=scheme,
            id_column=args.id,
        )
        print(f"Outcome '{task.outcome_name}' is {task.outcome_type.value}")

        learners = [create_learner(name.strip()) for name in args.learners.split(",")]
        if _needs_encoding(task):
            print("Non-numeric or missing covariates found; encoding before each learner")
            learners = [_with_encoding(learner) for learner in learners]

        config = (
            SuperLearnerConfig.builder()
            .n_jobs(args.n_jobs)
            .meta_learner(args.meta)
            .build()
        )
        super_learner = (
            SuperLearner.builder()
            .learners(learners)
            .config(config)
            .on_progress(on_progress)
            .build()
        )

        print(f"\nFitting {len(learners)} learners over {len(task.folds)} folds...")
        print("-" * 60)
        fit = super_learner.train(task)
    except SuperLearnerError as e:
        print(f"\nError: {e}")
        return 1
    except ValueError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nTraining cancelled by user")
        return 1

    state = fit.fit_object
    print("\n" + "-" * 60)
    print(f"Training time: {state.training_time_seconds:.1f}s")
    if state.risk is not None:
        print("\nCross-validated risk:")
        for row in state.risk.itertuples(index=False):
            print(
                f"  - {row.learner}: risk={row.risk:.4f} (se {row.se:.4f}), "
                f"coefficient={row.coefficient:.3f}"
            )
    for warning in state.warnings:
        print(f"Warning: {warning}")

    output_path = Path(args.output)
    save_fit(fit, output_path)
    print(f"\nFit saved to: {output_path}")
    return 0


def cmd_predict(args: argparse.Namespace) -> int:
    """Make batch predictions."""
    fit_path = Path(args.fit)
    data_path = Path(args.input)

    if not fit_path.exists():
        print(f"Error: Fit file not found: {fit_path}")
        return 1

    if not data_path.exists():
        print(f"Error: Data file not found: {data_path}")
        return 1

    print(f"Loading fit from {fit_path}...")
    artifact = load_artifact(fit_path)

    print(f"Making predictions on {data_path}...")
    data = pd.read_csv(data_path)
    try:
        task = artifact.fit.training_task.like(data)
        predictions = artifact.fit.predict(task)
    except SuperLearnerError as e:
        print(f"Error: {e}")
        return 1

    if isinstance(predictions, pd.Series):
        predictions = predictions.to_frame(name="prediction")

    output_path = Path(args.output)
    predictions.to_csv(output_path, index=False)
    print(f"Predictions saved to: {output_path}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Show fit information."""
    fit_path = Path(args.fit)

    if not fit_path.exists():
        print(f"Error: Fit file not found: {fit_path}")
        return 1

    info = load_artifact(fit_path).get_info()

    print(f"Fit: {fit_path}")
    print(f"  Version:       {info['version']}")
    print(f"  Learner:       {info['learner']} ({info['learner_type']})")
    print(f"  Outcome:       {info['outcome']} ({info['outcome_type']})")
    print(f"  Rows:          {info['n_rows']}")
    print(f"  Trained:       {info['trained_at']}")
    if info["training_time_seconds"] is not None:
        print(f"  Training Time: {info['training_time_seconds']:.1f}s")

    print("\nCovariates:")
    for name in info["covariates"]:
        print(f"  - {name}")

    if info.get("coefficients"):
        print("\nCoefficients:")
        for name, value in info["coefficients"].items():
            bar = "=" * int(max(value, 0.0) * 50)
            print(f"  {name:20s} {value:.3f} {bar}")

    if info.get("risk"):
        print("\nCross-validated risk:")
        for row in info["risk"]:
            print(f"  {row['learner']:20s} {row['risk']:.4f} (se {row['se']:.4f})")

    return 0


def _needs_encoding(task: Task) -> bool:
    X = task.X
    numeric = all(pd.api.types.is_numeric_dtype(X[c]) for c in X.columns)
    return not numeric or bool(X.isnull().any().any())


def _with_encoding(learner: Learner) -> Learner:
    return Pipeline(EncodingLearner(impute=True), learner, name=learner.name)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="superlearner: cross-validated ensemble learning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Fit command
    fit_parser = subparsers.add_parser("fit", help="Fit a Super Learner")
    fit_parser.add_argument("input", help="Input CSV file")
    fit_parser.add_argument("-y", "--outcome", required=True, help="Outcome column name")
    fit_parser.add_argument(
        "-c", "--covariates", help="Comma-separated covariate columns (default: all others)"
    )
    fit_parser.add_argument(
        "-t",
        "--outcome-type",
        choices=["continuous", "binary", "categorical"],
        help="Outcome type (inferred if not specified)",
    )
    fit_parser.add_argument(
        "-l",
        "--learners",
        default="glm,random_forest",
        help="Comma-separated learner names",
    )
    fit_parser.add_argument(
        "-m", "--meta", default="nnls", help="Meta-learner (nnls, linear, selector)"
    )
    fit_parser.add_argument("-k", "--folds", type=int, default=10, help="Number of folds")
    fit_parser.add_argument(
        "--fold-kind", choices=["vfold", "stratified", "cluster"], help="Fold generation scheme"
    )
    fit_parser.add_argument("--id", help="Cluster id column")
    fit_parser.add_argument("--seed", type=int, default=42, help="Random seed")
    fit_parser.add_argument("-j", "--n-jobs", type=int, default=1, help="Parallel workers")
    fit_parser.add_argument("-o", "--output", default="fit.pkl", help="Output fit path")
    fit_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # Predict command
    predict_parser = subparsers.add_parser("predict", help="Make batch predictions")
    predict_parser.add_argument("fit", help="Fit file (.pkl)")
    predict_parser.add_argument("input", help="Input CSV file")
    predict_parser.add_argument("-o", "--output", default="predictions.csv", help="Output CSV path")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show fit information")
    info_parser.add_argument("fit", help="Fit file (.pkl)")

    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "fit":
        return cmd_fit(args)
    elif args.command == "predict":
        return cmd_predict(args)
    elif args.command == "info":
        return cmd_info(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
