import logging

import vo2perc

vo2perc.setup_logging(logging.INFO)

# independent random streams for every temperature
betas = [0.5, 1.0, 2.0, 4.0]
streams = vo2perc.RandomSource(seed = 2012).spawn(len(betas))

for beta, rng in zip(betas, streams):
    energetics = vo2perc.Energetics(vo2perc.Environment(beta = beta, delta = 1.0, v = 1.5))
    mc = vo2perc.MonteCarlo(eta_minimum = 1e-12, total_steps = 20000, record_interval = 0, rng = rng)
    output = mc.simulate(energetics, 24, 24)

    # average over the second half of the run
    tail = output[len(output) // 2:]
    active = sum(o.active_sites for o in tail) / len(tail)
    dimers = sum(o.dimers for o in tail) / len(tail)
    largest = sum(o.largest_cluster_size for o in tail) / len(tail)
    print(f"beta = {beta}: active sites {active:.1f}, dimers {dimers:.1f}, largest cluster {largest:.1f}")

    # the final grid is always recorded
    final = output[-1].grid
    if final.active_site_count() > 0:
        print(f"  mu with one electron per active site: {energetics.find_mu(final, final.active_site_count()):.4f}")
