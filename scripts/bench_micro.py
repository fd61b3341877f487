from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from statistics import mean, pstdev

CONFIGS = {
    "sigmoid": ("sigmoid", None),
    "tanh": ("tanh", "sigmoid"),
    "relu-softmax": ("relu", "softmax"),
}


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.4f} ± {sd:.4f}"


def train_one(name: str, seed: int, epochs: int, lr: float, batch: int) -> dict:
    from neuronets.core.network import Network
    from neuronets.data import get_dataset
    from neuronets.training.metrics import evaluate

    hidden, last = CONFIGS[name]
    dataset = get_dataset("blobs", seed=seed)
    spec = dataset.data_spec
    net = Network([spec.d_in, 8, spec.d_out], seed=seed).with_activation(hidden)
    if last:
        net.with_last_activation(last)
    net.with_epoch(epochs).with_batch_size(batch)
    net.train(dataset.samples("train"), lr)
    scores = evaluate(net, dataset.samples("test"), ["accuracy"])
    return {"final_loss": scores["loss"], "final_acc": scores["accuracy"]}


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--epochs", type=int, default=100)
    ap.add_argument("--lr", type=float, default=0.5)
    ap.add_argument("--batch", type=int, default=8)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for name in CONFIGS:
        for s in args.seeds:
            r = train_one(name, seed=s, epochs=args.epochs, lr=args.lr, batch=args.batch)
            runs.append({"config": name, "seed": s, **r})
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    agg = {}
    for name in CONFIGS:
        accs = [r["final_acc"] for r in runs if r["config"] == name]
        losses = [r["final_loss"] for r in runs if r["config"] == name]
        agg[name] = {
            "n": len(accs),
            "acc": accs,
            "loss": losses,
            "final_acc_mu": mean(accs),
            "final_loss_mu": mean(losses),
        }
    baseline = agg["sigmoid"]["final_acc_mu"]

    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["config", "seeds", "epochs", "final_loss_mu", "final_acc_mu", "delta_acc"])
        for name in CONFIGS:
            a = agg[name]
            w.writerow(
                [
                    name,
                    a["n"],
                    args.epochs,
                    f"{a['final_loss_mu']:.4f}",
                    f"{a['final_acc_mu']:.4f}",
                    f"{a['final_acc_mu'] - baseline:.4f}",
                ]
            )

    md_path = out / "bench_micro.md"
    lines = [
        "### Micro-benchmark: activation configurations on `blobs`",
        "",
        f"- Seeds: `{args.seeds}`; Epochs: `{args.epochs}`; "
        f"LR: `{args.lr}`; Batch: `{args.batch}`",
        "",
        "| Config | Test Loss (μ±σ) | Test Acc (μ±σ) | ΔAcc vs sigmoid | Seeds |",
        "|---|---:|---:|---:|---:|",
    ]
    for name in CONFIGS:
        a = agg[name]
        lines.append(
            f"| {name.upper()} | {_fmt_mu_sigma(a['loss'])} | {_fmt_mu_sigma(a['acc'])} | "
            f"{a['final_acc_mu'] - baseline:+.4f} | {a['n']} |"
        )
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
