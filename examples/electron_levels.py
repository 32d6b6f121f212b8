from vo2perc import *

# a single dimer row next to an isolated site
grid = Grid([[True, False, True], [False, False, True]])

env = Environment.from_string("""{
    "Beta" : 1.0, "Delta" : 1.0, "V" : 0.5,
    "Epsilon_alpha" : 0.1, "Epsilon_beta" : 0.2,
    "T_alpha" : 1.0, "T_beta_dimer" : 2.0, "T_beta_diag" : 3.0
}""")
energetics = Energetics(env)

alpha, beta = energetics.electron_hamiltonian(grid)
print(alpha)

energies = energetics.electron_energies(grid)
print("levels:", energies)

particles = grid.active_site_count()
print("Fermi energy:", energetics.fermi_energy(grid, particles))
mu = energetics.find_mu(grid, particles)
print("mu:", mu, "electrons at mu:", energetics.num_electrons(energies, mu))
